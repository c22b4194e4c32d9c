import asyncio

import httpx
import pytest

from intent_engine.config.settings import LLM_CONFIG
from intent_engine.exceptions import ConfigurationError
from intent_engine.models.schemas import IntentLabel
from intent_engine.stages.ai_intent import (
    AIIntentStage,
    PARSE_FALLBACK_REASONING,
    TRANSPORT_FALLBACK_REASONING,
    find_json_object,
)

from conftest import fake_client


def run_stage(stage, lead, profile):
    return asyncio.run(stage.process(lead, profile))


def test_missing_api_key_fails_at_construction(monkeypatch):
    monkeypatch.setitem(LLM_CONFIG, "api_key", "")
    with pytest.raises(ConfigurationError):
        AIIntentStage()


def test_valid_json_response(lead, profile):
    stage = AIIntentStage(client=fake_client('{"intent": "High", "reasoning": "CEO of a tech company"}'))
    outcome = run_stage(stage, lead, profile)
    assert outcome.intent == IntentLabel.HIGH
    assert outcome.ai_score == 50
    assert outcome.reasoning == "CEO of a tech company"
    assert not outcome.is_fallback


@pytest.mark.parametrize("label,score", [("Medium", 30), ("Low", 10)])
def test_label_to_score(lead, profile, label, score):
    stage = AIIntentStage(client=fake_client(f'{{"intent": "{label}", "reasoning": "ok"}}'))
    assert run_stage(stage, lead, profile).ai_score == score


def test_json_wrapped_in_markdown(lead, profile):
    text = 'Sure!\n```json\n{"intent": "Medium", "reasoning": "Some fit {maybe}"}\n```'
    stage = AIIntentStage(client=fake_client(text))
    outcome = run_stage(stage, lead, profile)
    assert outcome.intent == IntentLabel.MEDIUM
    assert outcome.reasoning == "Some fit {maybe}"


def test_invalid_intent_uses_keyword_fallback(lead, profile):
    stage = AIIntentStage(client=fake_client('{"intent": "Very High", "reasoning": "strong fit"}'))
    outcome = run_stage(stage, lead, profile)
    assert outcome.intent == IntentLabel.HIGH
    assert outcome.ai_score == 50
    assert outcome.is_fallback
    assert outcome.reasoning == PARSE_FALLBACK_REASONING


def test_missing_reasoning_uses_keyword_fallback(lead, profile):
    stage = AIIntentStage(client=fake_client('{"intent": "Medium"}'))
    outcome = run_stage(stage, lead, profile)
    assert outcome.intent == IntentLabel.MEDIUM
    assert outcome.is_fallback


@pytest.mark.parametrize(
    "text,expected",
    [
        ("This lead shows strong interest", IntentLabel.HIGH),
        ("Moderate interest overall", IntentLabel.MEDIUM),
        ("Not a fit", IntentLabel.LOW),
        ("", IntentLabel.LOW),
        (None, IntentLabel.LOW),
    ],
)
def test_free_text_keyword_fallback(lead, profile, text, expected):
    stage = AIIntentStage(client=fake_client(text))
    outcome = run_stage(stage, lead, profile)
    assert outcome.intent == expected
    assert outcome.is_fallback


def test_transport_failure_returns_low(lead, profile):
    error = httpx.ConnectError("connection refused")
    stage = AIIntentStage(client=fake_client(error=error))
    outcome = run_stage(stage, lead, profile)
    assert outcome.intent == IntentLabel.LOW
    assert outcome.ai_score == 10
    assert outcome.reasoning == TRANSPORT_FALLBACK_REASONING
    assert outcome.is_fallback


def test_prompt_contains_product_and_lead(lead, profile):
    client = fake_client('{"intent": "Low", "reasoning": "n/a"}')
    run_stage(AIIntentStage(client=client), lead, profile)

    prompt = client.chat.completions.prompts[0]
    assert "AI Outreach Automation" in prompt
    assert "24/7 outreach, 6x more meetings" in prompt
    assert "B2B SaaS mid-market, Technology companies" in prompt
    for value in ("John Doe", "CEO", "TechCorp", "Technology", "San Francisco", lead.bio):
        assert value in prompt


def test_find_json_object():
    assert find_json_object('x {"a": {"b": 1}} y {"c": 2}') == '{"a": {"b": 1}}'
    assert find_json_object('{"a": "}"}') == '{"a": "}"}'
    assert find_json_object("no braces") is None
    assert find_json_object("{ unclosed") is None
