"""
FastAPI Endpoints for the Lead Intent Scoring Engine
====================================================
RESTful API for saving an offer, uploading leads and scoring them.

Base URL: http://localhost:8000

Endpoints:
- GET  /                         - API info
- GET  /api/health               - Health check
- POST /api/offer                - Save product info
- GET  /api/offer                - Get saved product info
- POST /api/leads/upload         - Upload leads CSV (field "leads")
- GET  /api/leads                - Get uploaded leads
- GET  /api/leads/sample         - Sample CSV format
- POST /api/score                - Score all uploaded leads
- GET  /api/results              - Get scoring results
- GET  /api/results/export/csv   - Download results as CSV
- GET  /api/stats                - Store and engine statistics
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import APIRouter, Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from ..models.schemas import ProductProfile, LeadSummary, ResultSummary, ScoreRunResponse
from ..config.settings import LLM_CONFIG, UPLOAD_CONFIG
from ..engine import IntentScoringEngine, create_engine, summarize_results
from ..exceptions import ConfigurationError, CSVFormatError, PreconditionMissing
from ..leads_csv import parse_leads_csv, results_to_csv
from ..storage import LeadStore

logger = logging.getLogger(__name__)

SAMPLE_LEADS = [
    {
        "name": "John Doe",
        "role": "CEO",
        "company": "TechCorp",
        "industry": "Technology",
        "location": "San Francisco",
        "linkedin_bio": "Tech leader with 10+ years experience",
    },
    {
        "name": "Jane Smith",
        "role": "Marketing Manager",
        "company": "GrowthCo",
        "industry": "B2B SaaS",
        "location": "New York",
        "linkedin_bio": "Marketing expert focused on growth",
    },
]


# =============================================================================
# Dependencies
# =============================================================================

def get_store(request: Request) -> LeadStore:
    return request.app.state.store


def get_engine(request: Request) -> IntentScoringEngine:
    """Build the scoring engine on first use so a missing API key fails loudly here"""
    state = request.app.state
    if state.engine is None:
        state.engine = state.engine_factory()
    return state.engine


def _error(error: str, message: str) -> dict:
    return {"error": error, "message": message}


def _lead_summary(lead) -> LeadSummary:
    return LeadSummary(
        name=lead.name,
        role=lead.role,
        company=lead.company,
        industry=lead.industry,
        location=lead.location,
    )


def _result_summary(result) -> ResultSummary:
    return ResultSummary(
        name=result.name,
        role=result.role,
        company=result.company,
        industry=result.industry,
        location=result.location,
        intent=result.intent,
        score=result.score,
        reasoning=result.reasoning,
    )


# =============================================================================
# Info Endpoints
# =============================================================================

info_router = APIRouter(tags=["Info"])


@info_router.get("/")
async def root():
    """API information and available endpoints"""
    return {
        "service": "Lead Intent Scoring Engine",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": [
            "POST /api/offer - save product info",
            "POST /api/leads/upload - upload csv file",
            "POST /api/score - score the leads",
            "GET /api/results - get results",
        ],
    }


@info_router.get("/api/health")
async def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "Lead Intent Scoring Engine",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "llm_configured": bool(LLM_CONFIG.get("api_key")),
    }


@info_router.get("/api/stats")
async def get_stats(request: Request, store: LeadStore = Depends(get_store)):
    """Store and engine statistics"""
    engine = request.app.state.engine
    return {
        "store": store.get_stats(),
        "engine": engine.get_stats() if engine else None,
    }


# =============================================================================
# Offer Endpoints
# =============================================================================

offer_router = APIRouter(prefix="/api/offer", tags=["Offer"])


@offer_router.post("", status_code=201)
async def save_offer(profile: ProductProfile, store: LeadStore = Depends(get_store)):
    """Save the product the leads will be scored against"""
    saved = store.set_profile(profile)
    return {"message": "Offer saved successfully!", "offer": saved}


@offer_router.get("")
async def get_offer(store: LeadStore = Depends(get_store)):
    """Get the saved product"""
    offer = store.get_profile()
    if not offer:
        raise HTTPException(
            status_code=404,
            detail=_error("No offer found", "Please save an offer first using POST /api/offer"),
        )
    return {"message": "Offer found!", "offer": offer}


# =============================================================================
# Lead Endpoints
# =============================================================================

leads_router = APIRouter(prefix="/api/leads", tags=["Leads"])


@leads_router.post("/upload", status_code=201)
async def upload_leads(
    leads: UploadFile = File(..., description="CSV with name,role,company,industry,location,linkedin_bio"),
    store: LeadStore = Depends(get_store),
):
    """Upload a CSV of leads, replacing any previous upload"""
    raw = await leads.read(UPLOAD_CONFIG["max_bytes"] + 1)
    if len(raw) > UPLOAD_CONFIG["max_bytes"]:
        raise HTTPException(
            status_code=413,
            detail=_error("File too large", "CSV must be 5MB or smaller"),
        )

    try:
        parsed = parse_leads_csv(raw)
    except CSVFormatError as e:
        raise HTTPException(status_code=400, detail=_error("Invalid CSV", str(e)))

    if not parsed:
        raise HTTPException(
            status_code=400,
            detail=_error("No valid leads found", "CSV must have name and company columns with data"),
        )

    saved = store.set_leads(parsed)
    return {
        "message": "Leads uploaded successfully!",
        "count": len(saved),
        "leads": [_lead_summary(lead) for lead in saved],
    }


@leads_router.get("")
async def list_leads(store: LeadStore = Depends(get_store)):
    """Get uploaded leads"""
    leads = store.get_leads()
    if not leads:
        raise HTTPException(
            status_code=404,
            detail=_error("No leads found", "Upload a CSV file first using POST /api/leads/upload"),
        )
    return {
        "message": "Leads found!",
        "count": len(leads),
        "leads": [_lead_summary(lead) for lead in leads],
    }


@leads_router.get("/sample")
async def sample_leads():
    """Sample CSV format"""
    return {
        "message": "Sample CSV format",
        "columns": UPLOAD_CONFIG["columns"],
        "sample_data": SAMPLE_LEADS,
        "csv_example": "John Doe,CEO,TechCorp,Technology,San Francisco,Tech leader...",
    }


# =============================================================================
# Scoring Endpoints
# =============================================================================

scoring_router = APIRouter(tags=["Scoring"])


@scoring_router.post("/api/score", response_model=ScoreRunResponse)
async def run_scoring(request: Request, store: LeadStore = Depends(get_store)):
    """
    Score every uploaded lead against the saved offer.

    Leads are scored one at a time, so large uploads take a while.
    """
    profile = store.get_profile()
    if not profile:
        raise PreconditionMissing("No offer found", "Please save an offer first using POST /api/offer")

    leads = store.get_leads()
    if not leads:
        raise PreconditionMissing("No leads found", "Please upload leads first using POST /api/leads/upload")

    engine = get_engine(request)

    logger.info("Starting to score %d leads", len(leads))
    results = await engine.score_batch(leads, profile)
    saved = store.set_results(results)

    return ScoreRunResponse(
        message="Scoring completed!",
        summary=summarize_results(saved),
        results=[_result_summary(r) for r in saved],
    )


@scoring_router.get("/api/results")
async def get_results(store: LeadStore = Depends(get_store)):
    """Get scoring results from the last run"""
    results = store.get_results()
    if not results:
        raise HTTPException(
            status_code=404,
            detail=_error("No results found", "Run scoring first using POST /api/score"),
        )
    return {
        "message": "Results found!",
        "count": len(results),
        "results": [_result_summary(r) for r in results],
    }


@scoring_router.get("/api/results/export/csv")
async def export_results(store: LeadStore = Depends(get_store)):
    """Download scoring results as a CSV file"""
    results = store.get_results()
    if not results:
        raise HTTPException(
            status_code=404,
            detail=_error("No results found", "Run scoring first to export results"),
        )

    filename = f"lead-results-{datetime.now(timezone.utc).date().isoformat()}.csv"
    return Response(
        content=results_to_csv(results),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# =============================================================================
# App Factory
# =============================================================================

def create_app(
    store: Optional[LeadStore] = None,
    engine_factory: Optional[Callable[[], IntentScoringEngine]] = None,
) -> FastAPI:
    """
    Build the API.

    Args:
        store: Store shared by all handlers (a fresh one if not provided)
        engine_factory: Builds the scoring engine on the first scoring run
    """
    app = FastAPI(
        title="Lead Intent Scoring API",
        description="""
## Lead Buying-Intent Scoring

Scores prospective customers against your product with rules plus AI.

### Quick Start:
1. `POST /api/offer` with your product name, value props and ideal use cases
2. `POST /api/leads/upload` with a CSV of leads
3. `POST /api/score` to score them
4. `GET /api/results/export/csv` to download the results
        """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware - Allow all origins for frontend development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.store = store or LeadStore()
    app.state.engine_factory = engine_factory or create_engine
    app.state.engine = None

    app.include_router(info_router)
    app.include_router(offer_router)
    app.include_router(leads_router)
    app.include_router(scoring_router)

    # =========================================================================
    # Error Handlers
    # =========================================================================

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc: StarletteHTTPException):
        # Route errors carry an error/message dict; framework errors carry a plain string
        if isinstance(exc.detail, dict):
            content = exc.detail
        else:
            content = _error(str(exc.detail), str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(PreconditionMissing)
    async def precondition_handler(request, exc: PreconditionMissing):
        return JSONResponse(status_code=400, content=_error(exc.error, exc.message))

    @app.exception_handler(ConfigurationError)
    async def configuration_handler(request, exc: ConfigurationError):
        logger.error("Scoring engine misconfigured: %s", exc)
        return JSONResponse(
            status_code=500,
            content=_error("API key problem", str(exc)),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error("Internal server error", str(exc)),
        )

    return app


app = create_app()
