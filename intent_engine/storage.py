"""
In-memory store for the offer, uploaded leads and scoring results.

Every setter replaces the previous contents wholesale. Nothing survives a
restart. One instance is created per app and handed to the request handlers.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from .models.schemas import (
    ProductProfile,
    LeadRecord,
    LeadScoreResult,
    StoredProfile,
    StoredLead,
    StoredResult,
)

logger = logging.getLogger(__name__)


class LeadStore:
    def __init__(self):
        self.profile: Optional[StoredProfile] = None
        self.leads: List[StoredLead] = []
        self.results: List[StoredResult] = []

    def set_profile(self, profile: ProductProfile) -> StoredProfile:
        self.profile = StoredProfile(
            **profile.model_dump(),
            id=_generate_id(),
            created_at=datetime.now(timezone.utc),
        )
        logger.info("Offer saved: %s", self.profile.name)
        return self.profile

    def get_profile(self) -> Optional[StoredProfile]:
        return self.profile

    def set_leads(self, leads: List[LeadRecord]) -> List[StoredLead]:
        uploaded_at = datetime.now(timezone.utc)
        self.leads = [
            StoredLead(**lead.model_dump(), id=_generate_id(), uploaded_at=uploaded_at)
            for lead in leads
        ]
        logger.info("%d leads saved", len(self.leads))
        return self.leads

    def get_leads(self) -> List[StoredLead]:
        return self.leads

    def set_results(self, results: List[LeadScoreResult]) -> List[StoredResult]:
        scored_at = datetime.now(timezone.utc)
        self.results = [
            StoredResult(**result.model_dump(), id=_generate_id(), scored_at=scored_at)
            for result in results
        ]
        logger.info("%d results saved", len(self.results))
        return self.results

    def get_results(self) -> List[StoredResult]:
        return self.results

    def clear_all(self):
        """Drop offer, leads and results"""
        self.profile = None
        self.leads = []
        self.results = []
        logger.info("Store cleared")

    def get_stats(self) -> Dict[str, Any]:
        return {
            "has_profile": self.profile is not None,
            "leads_count": len(self.leads),
            "results_count": len(self.results),
            "last_updated": datetime.now(timezone.utc).isoformat(),
        }


def _generate_id() -> str:
    return uuid.uuid4().hex
