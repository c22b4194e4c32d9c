"""
Pydantic schemas for the Lead Intent Scoring Engine
"""

from enum import Enum
from typing import List, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime


# =============================================================================
# ENUMS
# =============================================================================

class IntentLabel(str, Enum):
    """Buying intent classification"""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


# =============================================================================
# INPUT SCHEMAS
# =============================================================================

class ProductProfile(BaseModel):
    """The product (offer) that leads are scored against"""
    model_config = ConfigDict(frozen=True)

    name: str
    value_props: List[str] = Field(..., min_length=1)
    ideal_use_cases: List[str] = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must be a non-empty string")
        return value

    @field_validator("value_props", "ideal_use_cases")
    @classmethod
    def _strip_items(cls, value: List[str]) -> List[str]:
        return [item.strip() for item in value]


class LeadRecord(BaseModel):
    """A prospective customer as uploaded from CSV"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    role: str = ""
    company: str = ""
    industry: str = ""
    location: str = ""
    bio: Optional[str] = Field(None, alias="linkedin_bio")

    @field_validator("name", "role", "company", "industry", "location", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @property
    def is_eligible(self) -> bool:
        """Only leads with a name and a company are scored"""
        return bool(self.name.strip() and self.company.strip())


# =============================================================================
# STAGE RESULT SCHEMAS
# =============================================================================

class RuleBreakdown(BaseModel):
    """Result from the rule evaluation stage"""
    role_score: int = Field(..., ge=0, le=20)
    industry_score: int = Field(..., ge=0, le=20)
    completeness_score: int = Field(..., ge=0, le=10)

    @property
    def total(self) -> int:
        return self.role_score + self.industry_score + self.completeness_score


class AIIntentResponse(BaseModel):
    """Strict shape of the JSON object the LLM must return"""
    intent: Literal["High", "Medium", "Low"]
    reasoning: str = Field(..., min_length=1)


class AIOutcome(BaseModel):
    """Result from the AI intent stage"""
    intent: IntentLabel
    reasoning: str
    ai_score: Literal[10, 30, 50]
    is_fallback: bool = False


# =============================================================================
# UNIFIED OUTPUT SCHEMA
# =============================================================================

class ScoreBreakdown(BaseModel):
    """How the final score was assembled"""
    rule_score: int = Field(..., ge=0, le=50)
    ai_score: int = Field(..., ge=0, le=50)
    ai_intent: IntentLabel
    ai_reasoning: str


class LeadScoreResult(BaseModel):
    """Complete scoring result for one lead"""
    name: str
    role: str = ""
    company: str
    industry: str = ""
    location: str = ""
    intent: IntentLabel
    score: int = Field(..., ge=0, le=100)
    reasoning: str
    breakdown: ScoreBreakdown


class BatchSummary(BaseModel):
    """Aggregate view over a scoring run"""
    total: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    average_score: int = 0


# =============================================================================
# STORED RECORDS
# =============================================================================

class StoredProfile(ProductProfile):
    id: str
    created_at: datetime


class StoredLead(LeadRecord):
    id: str
    uploaded_at: datetime


class StoredResult(LeadScoreResult):
    id: str
    scored_at: datetime


# =============================================================================
# API RESPONSE SCHEMAS
# =============================================================================

class LeadSummary(BaseModel):
    """Lead fields returned by the API"""
    name: str
    role: str
    company: str
    industry: str
    location: str


class ResultSummary(LeadSummary):
    """Result fields returned by the API"""
    intent: IntentLabel
    score: int
    reasoning: str


class ScoreRunResponse(BaseModel):
    message: str
    summary: BatchSummary
    results: List[ResultSummary]
