"""
CSV import of leads and CSV export of scoring results.
"""

import io
import logging
from typing import List

import pandas as pd

from .models.schemas import LeadRecord, LeadScoreResult
from .config.settings import UPLOAD_CONFIG
from .exceptions import CSVFormatError

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["Name", "Role", "Company", "Industry", "Location", "Intent", "Score", "Reasoning"]


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Lower-case headers and make sure every expected column exists."""
    df = df.rename(columns={c: str(c).strip().lower() for c in df.columns})
    for col in UPLOAD_CONFIG["columns"]:
        if col not in df.columns:
            df[col] = ""
    return df


def parse_leads_csv(raw: bytes) -> List[LeadRecord]:
    """
    Read uploaded CSV bytes into lead records.

    Values are trimmed and leads without a name or company are dropped.

    Raises:
        CSVFormatError: if the content is empty or not parseable
    """
    try:
        df = pd.read_csv(io.BytesIO(raw), dtype=str, keep_default_na=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise CSVFormatError(f"Could not read CSV: {e}") from e

    df = _normalize_columns(df)

    leads = []
    for row in df[UPLOAD_CONFIG["columns"]].to_dict(orient="records"):
        lead = LeadRecord(**{k: (v or "").strip() for k, v in row.items()})
        if lead.is_eligible:
            leads.append(lead)

    logger.info("Parsed %d rows, %d eligible leads", len(df), len(leads))
    return leads


def results_to_csv(results: List[LeadScoreResult]) -> str:
    """Render scoring results as CSV text with a header row."""
    rows = [
        [r.name, r.role, r.company, r.industry, r.location, r.intent.value, r.score, r.reasoning]
        for r in results
    ]
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    return df.to_csv(index=False)
