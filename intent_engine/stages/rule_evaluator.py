"""
Rule Evaluation Stage
=====================
Deterministic scoring of a lead against the product profile.
No external calls and no state, so the same inputs always give the same breakdown.

Sub-scores:
- Role relevance (0-20): decision maker vs influencer titles
- Industry match (0-20): direct match or related industry group
- Data completeness (0-10): populated fields plus a bio bonus
"""

from typing import Dict, List, Optional

from ..models.schemas import LeadRecord, ProductProfile, RuleBreakdown
from ..config.settings import (
    ROLE_VOCABULARY,
    INDUSTRY_GROUPS,
    COMPLETENESS_FIELDS,
    RULE_POINTS,
    SCORE_CAPS,
)


class RuleEvaluationStage:
    """
    Score role, industry and completeness for a single lead.
    """

    def __init__(
        self,
        role_vocabulary: Optional[Dict[str, List[str]]] = None,
        industry_groups: Optional[Dict[str, List[str]]] = None,
    ):
        """
        Initialize with keyword tables or use defaults.

        Args:
            role_vocabulary: {"decision_maker": [...], "influencer": [...]}
            industry_groups: group name -> related industry keywords
        """
        vocabulary = role_vocabulary or ROLE_VOCABULARY
        self.decision_maker_roles = vocabulary.get("decision_maker", [])
        self.influencer_roles = vocabulary.get("influencer", [])
        self.industry_groups = industry_groups or INDUSTRY_GROUPS

    def process(self, lead: LeadRecord, profile: ProductProfile) -> RuleBreakdown:
        """
        Evaluate all rules for a lead.

        Args:
            lead: Lead to evaluate
            profile: Product profile to match against

        Returns:
            RuleBreakdown with the three sub-scores (sum is not capped here)
        """
        return RuleBreakdown(
            role_score=self.score_role(lead.role),
            industry_score=self.score_industry(lead.industry, profile.ideal_use_cases),
            completeness_score=self.score_completeness(lead),
        )

    def describe(self, breakdown: RuleBreakdown) -> List[str]:
        """Human-readable factors that contributed to the rule score"""
        reasons = []

        if breakdown.role_score == RULE_POINTS["decision_maker"]:
            reasons.append("Decision maker role")
        elif breakdown.role_score == RULE_POINTS["influencer"]:
            reasons.append("Influencer role")

        if breakdown.industry_score == RULE_POINTS["direct_industry"]:
            reasons.append("Industry matches profile")
        elif breakdown.industry_score == RULE_POINTS["related_industry"]:
            reasons.append("Related industry")

        if breakdown.completeness_score >= RULE_POINTS["complete_profile_threshold"]:
            reasons.append("Complete profile data")

        return reasons

    # =========================================================================
    # Sub-scores
    # =========================================================================

    def score_role(self, role: Optional[str]) -> int:
        """Score role relevance (0-20)"""
        if not role:
            return 0

        lower_role = role.lower()

        # Decision makers win even if an influencer token also appears
        for token in self.decision_maker_roles:
            if token in lower_role:
                return RULE_POINTS["decision_maker"]

        for token in self.influencer_roles:
            if token in lower_role:
                return RULE_POINTS["influencer"]

        return 0

    def score_industry(self, industry: Optional[str], use_cases: List[str]) -> int:
        """Score industry match against the ideal use cases (0-20)"""
        if not industry or not industry.strip() or not use_cases:
            return 0

        lower_industry = industry.strip().lower()
        lower_cases = [u.strip().lower() for u in use_cases if u and u.strip()]

        for use_case in lower_cases:
            if use_case in lower_industry or lower_industry in use_case:
                return RULE_POINTS["direct_industry"]

        for use_case in lower_cases:
            if self.is_related_industry(lower_industry, use_case):
                return RULE_POINTS["related_industry"]

        return 0

    def is_related_industry(self, industry: str, use_case: str) -> bool:
        """True if both strings hit keywords from the same industry group"""
        for keywords in self.industry_groups.values():
            industry_in_group = any(k in industry for k in keywords)
            use_case_in_group = any(k in use_case for k in keywords)
            if industry_in_group and use_case_in_group:
                return True
        return False

    def score_completeness(self, lead: LeadRecord) -> int:
        """Score data completeness (0-10)"""
        completed = sum(
            1 for field in COMPLETENESS_FIELDS
            if (getattr(lead, field, "") or "").strip()
        )
        base = round(completed / len(COMPLETENESS_FIELDS) * SCORE_CAPS["completeness"])

        if lead.bio and lead.bio.strip():
            return min(base + RULE_POINTS["bio_bonus"], SCORE_CAPS["completeness"])

        return base
