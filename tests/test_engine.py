import asyncio

import pytest

from intent_engine.config.settings import RULE_POINTS, SCORE_CAPS
from intent_engine.engine import IntentScoringEngine, classify_intent, summarize_results
from intent_engine.models.schemas import AIOutcome, IntentLabel, LeadRecord
from intent_engine.stages.ai_intent import AIIntentStage

from conftest import FakeAIStage, fake_client


def make_engine(ai_stage=None):
    return IntentScoringEngine(ai_stage=ai_stage or FakeAIStage(), batch_delay=0)


@pytest.mark.parametrize(
    "score,label",
    [
        (100, IntentLabel.HIGH),
        (85, IntentLabel.HIGH),
        (70, IntentLabel.HIGH),
        (69, IntentLabel.MEDIUM),
        (55, IntentLabel.MEDIUM),
        (40, IntentLabel.MEDIUM),
        (39, IntentLabel.LOW),
        (0, IntentLabel.LOW),
    ],
)
def test_classify_intent(score, label):
    assert classify_intent(score) == label


def test_score_lead_combines_rules_and_ai(lead, profile):
    result = asyncio.run(make_engine().score_lead(lead, profile))

    assert result.name == "John Doe"
    assert result.company == "TechCorp"
    assert result.breakdown.rule_score == 50
    assert result.breakdown.ai_score == 50
    assert result.breakdown.ai_intent == IntentLabel.HIGH
    assert result.score == 100
    assert result.intent == IntentLabel.HIGH
    assert result.reasoning == (
        "Profile analysis: Decision maker role, Industry matches profile, Complete profile data. "
        "AI Analysis: Test AI reasoning"
    )


def test_score_lead_limited_profile(profile):
    ai = FakeAIStage(AIOutcome(intent=IntentLabel.LOW, reasoning="Unknown fit", ai_score=10))
    sparse = LeadRecord(name="Sam", company="Acme")

    result = asyncio.run(make_engine(ai).score_lead(sparse, profile))

    assert result.breakdown.rule_score == 4
    assert result.score == 14
    assert result.intent == IntentLabel.LOW
    assert result.reasoning.startswith("Limited profile information available.")
    assert result.reasoning.endswith("AI Analysis: Unknown fit")


def test_score_lead_medium_band(profile):
    ai = FakeAIStage(AIOutcome(intent=IntentLabel.MEDIUM, reasoning="ok", ai_score=30))
    analyst = LeadRecord(name="Ann", role="Analyst", company="Acme", industry="Software")

    result = asyncio.run(make_engine(ai).score_lead(analyst, profile))

    # 10 role + 10 related industry + 8 completeness
    assert result.breakdown.rule_score == 28
    assert result.score == 58
    assert result.intent == IntentLabel.MEDIUM


def test_score_lead_adapter_failure_gives_fallback(lead, profile):
    engine = make_engine(FakeAIStage(fail_for={"John Doe"}))
    result = asyncio.run(engine.score_lead(lead, profile))

    assert result.intent == IntentLabel.LOW
    assert result.score == 10
    assert result.breakdown.rule_score == 0
    assert result.breakdown.ai_score == 10
    assert "Scoring failed" in result.reasoning
    assert engine.stats["scoring_errors"] == 1


def test_score_lead_with_malformed_llm_output(lead, profile):
    ai = AIIntentStage(client=fake_client("I'd say moderate interest"))
    engine = make_engine(ai)

    result = asyncio.run(engine.score_lead(lead, profile))

    assert result.breakdown.ai_intent == IntentLabel.MEDIUM
    assert result.score == 80
    assert engine.get_stats()["ai_fallbacks"] == 1


def test_score_batch_preserves_order(lead, profile):
    leads = [lead.model_copy(update={"name": n}) for n in ("John Doe", "Jane Smith", "Mike Johnson")]
    results = asyncio.run(make_engine().score_batch(leads, profile))

    assert [r.name for r in results] == ["John Doe", "Jane Smith", "Mike Johnson"]
    assert all(0 <= r.score <= 100 for r in results)


def test_score_batch_continues_after_failure(lead, profile):
    ai = FakeAIStage(fail_for={"Broken"})
    leads = [
        lead.model_copy(update={"name": "First"}),
        LeadRecord(name="Broken"),
        lead.model_copy(update={"name": "Last"}),
    ]

    results = asyncio.run(make_engine(ai).score_batch(leads, profile))

    assert len(results) == 3
    assert ai.calls == ["First", "Broken", "Last"]
    assert results[1].intent == IntentLabel.LOW
    assert results[1].score == 10
    assert results[0].score == 100
    assert results[2].score == 100


def test_score_batch_empty(profile):
    results = asyncio.run(make_engine().score_batch([], profile))
    assert results == []
    assert summarize_results(results).model_dump() == {
        "total": 0, "high": 0, "medium": 0, "low": 0, "average_score": 0,
    }


def test_score_batch_pauses_between_leads_only(lead, profile, monkeypatch):
    engine = make_engine()
    pauses = []

    async def fake_pause():
        pauses.append(True)

    monkeypatch.setattr(engine, "_pause", fake_pause)
    asyncio.run(engine.score_batch([lead, lead, lead], profile))

    assert len(pauses) == 2


def test_summarize_results(lead, profile):
    engine = make_engine(FakeAIStage(fail_for={"Broken"}))
    leads = [lead, lead, LeadRecord(name="Broken")]
    results = asyncio.run(engine.score_batch(leads, profile))

    summary = summarize_results(results)

    assert summary.total == 3
    assert summary.high == 2
    assert summary.medium == 0
    assert summary.low == 1
    # (100 + 100 + 10) / 3 = 70
    assert summary.average_score == 70


def test_summary_rounds_half_up(lead, profile):
    results = asyncio.run(make_engine().score_batch([lead], profile))
    low = results[0].model_copy(update={"score": 11, "intent": IntentLabel.LOW})
    # (100 + 11) / 2 = 55.5
    assert summarize_results([results[0], low]).average_score == 56


def test_stats(lead, profile):
    engine = make_engine()
    asyncio.run(engine.score_batch([lead, lead], profile))

    stats = engine.get_stats()
    assert stats["total_processed"] == 2
    assert stats["fallback_rate"] == 0
    assert "avg_processing_time_ms" in stats

    engine.reset_stats()
    assert engine.get_stats()["total_processed"] == 0


def test_rule_caps_match_rule_points():
    assert set(SCORE_CAPS) == {"completeness", "rule", "final"}
    assert RULE_POINTS["decision_maker"] + RULE_POINTS["direct_industry"] + SCORE_CAPS["completeness"] == SCORE_CAPS["rule"]
