"""
Lead Intent Scoring Engine - Main Orchestrator
==============================================
Combines two independent signals per lead:
  Rule Evaluation (0-50) + AI Intent (10/30/50) = Final Score (0-100)

Batch scoring is strictly sequential with a short pause between AI calls,
so there is only ever one request in flight to the LLM provider.
A failure on one lead never aborts the batch.
"""

import asyncio
import logging
import math
import time
from typing import Optional, List, Dict, Any

from .models.schemas import (
    LeadRecord,
    ProductProfile,
    LeadScoreResult,
    ScoreBreakdown,
    IntentLabel,
    BatchSummary,
)
from .config.settings import BATCH_CONFIG, INTENT_THRESHOLDS, SCORE_CAPS, AI_INTENT_SCORES
from .stages.rule_evaluator import RuleEvaluationStage
from .stages.ai_intent import AIIntentStage

logger = logging.getLogger(__name__)


class IntentScoringEngine:
    """
    Main engine that scores leads with rules plus AI.
    """

    def __init__(
        self,
        ai_stage: Optional[AIIntentStage] = None,
        rule_stage: Optional[RuleEvaluationStage] = None,
        batch_delay: Optional[float] = None,
    ):
        """
        Initialize the scoring engine.

        Args:
            ai_stage: AI intent stage (built from environment if not provided)
            rule_stage: Rule evaluation stage (uses default vocabularies if not provided)
            batch_delay: Seconds to pause between leads in a batch
        """
        self.rule_stage = rule_stage or RuleEvaluationStage()
        self.ai_stage = ai_stage or AIIntentStage()
        self.batch_delay = BATCH_CONFIG["delay_seconds"] if batch_delay is None else batch_delay

        # Track statistics
        self.stats = {
            "total_processed": 0,
            "ai_fallbacks": 0,
            "scoring_errors": 0,
            "total_processing_time_ms": 0,
        }

    async def score_lead(self, lead: LeadRecord, profile: ProductProfile) -> LeadScoreResult:
        """
        Score a single lead.

        Args:
            lead: Lead to score
            profile: Product profile to score against

        Returns:
            LeadScoreResult; a Low/10 error result if anything goes wrong
        """
        start_time = time.time()
        self.stats["total_processed"] += 1

        try:
            breakdown = self.rule_stage.process(lead, profile)
            rule_score = min(breakdown.total, SCORE_CAPS["rule"])

            ai_result = await self.ai_stage.process(lead, profile)
            if ai_result.is_fallback:
                self.stats["ai_fallbacks"] += 1

            final_score = max(0, min(SCORE_CAPS["final"], rule_score + ai_result.ai_score))
            intent = classify_intent(final_score)

            rule_reasoning = _format_rule_reasoning(self.rule_stage.describe(breakdown))
            reasoning = f"{rule_reasoning} AI Analysis: {ai_result.reasoning}"

            result = LeadScoreResult(
                name=lead.name,
                role=lead.role,
                company=lead.company,
                industry=lead.industry,
                location=lead.location,
                intent=intent,
                score=final_score,
                reasoning=reasoning,
                breakdown=ScoreBreakdown(
                    rule_score=rule_score,
                    ai_score=ai_result.ai_score,
                    ai_intent=ai_result.intent,
                    ai_reasoning=ai_result.reasoning,
                ),
            )
            logger.info("Scored %s: %d/100 (%s)", lead.name, final_score, intent.value)

        except Exception:
            logger.exception("Error scoring lead %s", getattr(lead, "name", "?"))
            self.stats["scoring_errors"] += 1
            result = self._create_error_result(lead)

        self.stats["total_processing_time_ms"] += (time.time() - start_time) * 1000
        return result

    async def score_batch(
        self,
        leads: List[LeadRecord],
        profile: ProductProfile,
    ) -> List[LeadScoreResult]:
        """
        Score leads one after another, preserving input order.

        Args:
            leads: Leads to score
            profile: Product profile to score against

        Returns:
            One result per lead, in the same order
        """
        logger.info("Starting batch scoring for %d leads", len(leads))
        results = []

        for i, lead in enumerate(leads):
            logger.debug("Processing lead %d/%d: %s", i + 1, len(leads), lead.name)
            results.append(await self.score_lead(lead, profile))

            if i < len(leads) - 1:
                await self._pause()

        logger.info("Batch scoring completed: %d results", len(results))
        return results

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics"""
        stats = self.stats.copy()
        if stats["total_processed"] > 0:
            stats["fallback_rate"] = round(
                stats["ai_fallbacks"] / stats["total_processed"] * 100, 1
            )
            stats["avg_processing_time_ms"] = round(
                stats["total_processing_time_ms"] / stats["total_processed"], 2
            )
        return stats

    def reset_stats(self):
        """Reset engine statistics"""
        self.stats = {
            "total_processed": 0,
            "ai_fallbacks": 0,
            "scoring_errors": 0,
            "total_processing_time_ms": 0,
        }

    # =========================================================================
    # Helper Methods
    # =========================================================================

    async def _pause(self):
        if self.batch_delay > 0:
            await asyncio.sleep(self.batch_delay)

    def _create_error_result(self, lead: LeadRecord) -> LeadScoreResult:
        """Create a result for a lead that failed to score"""
        low_score = AI_INTENT_SCORES[IntentLabel.LOW.value]
        return LeadScoreResult(
            name=getattr(lead, "name", "") or "",
            role=getattr(lead, "role", "") or "",
            company=getattr(lead, "company", "") or "",
            industry=getattr(lead, "industry", "") or "",
            location=getattr(lead, "location", "") or "",
            intent=IntentLabel.LOW,
            score=low_score,
            reasoning="Scoring failed due to technical error",
            breakdown=ScoreBreakdown(
                rule_score=0,
                ai_score=low_score,
                ai_intent=IntentLabel.LOW,
                ai_reasoning="Scoring service error",
            ),
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def classify_intent(score: int) -> IntentLabel:
    """Map a final score to an intent label"""
    if score >= INTENT_THRESHOLDS["high"]:
        return IntentLabel.HIGH
    elif score >= INTENT_THRESHOLDS["medium"]:
        return IntentLabel.MEDIUM
    return IntentLabel.LOW


def summarize_results(results: List[LeadScoreResult]) -> BatchSummary:
    """Count leads per intent and average the final score"""
    if not results:
        return BatchSummary()

    counts = {label: 0 for label in IntentLabel}
    for result in results:
        counts[result.intent] += 1

    average = sum(r.score for r in results) / len(results)

    return BatchSummary(
        total=len(results),
        high=counts[IntentLabel.HIGH],
        medium=counts[IntentLabel.MEDIUM],
        low=counts[IntentLabel.LOW],
        average_score=math.floor(average + 0.5),
    )


def create_engine(
    llm_api_key: Optional[str] = None,
    llm_provider: Optional[str] = None,
) -> IntentScoringEngine:
    """
    Factory function to create a scoring engine backed by the configured LLM.

    Raises:
        ConfigurationError: if no LLM API key is available
    """
    ai_stage = AIIntentStage(api_key=llm_api_key, provider=llm_provider)
    return IntentScoringEngine(ai_stage=ai_stage)


def _format_rule_reasoning(reasons: List[str]) -> str:
    if not reasons:
        return "Limited profile information available."
    return f"Profile analysis: {', '.join(reasons)}."
