"""
Configuration settings for the Lead Intent Scoring Engine
"""

from typing import Dict, List
import os

# =============================================================================
# LLM CONFIGURATION (OpenRouter)
# =============================================================================

LLM_CONFIG = {
    "provider": os.getenv("LLM_PROVIDER", "openrouter"),  # openrouter, openai
    "model": os.getenv("LLM_MODEL", "google/gemini-flash-1.5"),  # OpenRouter model format
    "api_key": os.getenv("OPENROUTER_API_KEY") or os.getenv("OPENAI_API_KEY", ""),
    "base_url": os.getenv("LLM_BASE_URL", "https://openrouter.ai/api/v1"),
    "max_tokens": 300,
    "temperature": 0.3,
    "timeout": float(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
    # OpenRouter specific headers
    "site_url": os.getenv("OPENROUTER_SITE_URL", "http://localhost:8000"),
    "app_name": os.getenv("OPENROUTER_APP_NAME", "Lead Intent Scoring Engine"),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# =============================================================================
# BATCH PROCESSING
# =============================================================================

BATCH_CONFIG = {
    # Pause between AI calls to stay under provider rate limits
    "delay_seconds": float(os.getenv("SCORING_BATCH_DELAY", "0.1")),
}

# =============================================================================
# SCORE CAPS & POINTS
# =============================================================================

SCORE_CAPS = {
    "completeness": 10,
    "rule": 50,
    "final": 100,
}

RULE_POINTS = {
    "decision_maker": 20,
    "influencer": 10,
    "direct_industry": 20,
    "related_industry": 10,
    "bio_bonus": 1,
    "complete_profile_threshold": 8,
}

# =============================================================================
# INTENT MAPPING
# =============================================================================

INTENT_THRESHOLDS = {
    "high": 70,
    "medium": 40,
}

AI_INTENT_SCORES = {
    "High": 50,
    "Medium": 30,
    "Low": 10,
}

# =============================================================================
# ROLE VOCABULARY
# =============================================================================

# Order matters: decision makers are checked before influencers
ROLE_VOCABULARY: Dict[str, List[str]] = {
    "decision_maker": [
        "ceo", "cto", "cfo", "cmo", "president", "founder",
        "head of", "director", "vp", "manager", "lead",
    ],
    "influencer": [
        "senior", "specialist", "analyst", "coordinator",
    ],
}

# =============================================================================
# INDUSTRY MAPPING
# =============================================================================

INDUSTRY_GROUPS: Dict[str, List[str]] = {
    "tech": ["software", "saas", "technology", "it", "digital", "tech"],
    "saas": ["software", "technology", "tech", "cloud", "platform"],
    "b2b": ["enterprise", "business", "corporate", "commercial"],
    "ecommerce": ["retail", "online", "marketplace", "shopping"],
    "finance": ["fintech", "banking", "financial", "payments"],
    "healthcare": ["medical", "health", "pharma", "biotech"],
    "education": ["edtech", "learning", "training", "academic"],
}

COMPLETENESS_FIELDS = ["name", "role", "company", "industry", "location"]

# =============================================================================
# UPLOADS
# =============================================================================

UPLOAD_CONFIG = {
    "max_bytes": 5 * 1024 * 1024,
    "form_field": "leads",
    "columns": ["name", "role", "company", "industry", "location", "linkedin_bio"],
}
