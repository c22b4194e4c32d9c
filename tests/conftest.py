from types import SimpleNamespace

import pytest

from intent_engine.models.schemas import AIOutcome, IntentLabel, LeadRecord, ProductProfile


class FakeAIStage:
    """Stands in for the LLM stage; can fail for chosen lead names"""

    def __init__(self, outcome=None, fail_for=()):
        self.outcome = outcome or AIOutcome(
            intent=IntentLabel.HIGH, reasoning="Test AI reasoning", ai_score=50
        )
        self.fail_for = set(fail_for)
        self.calls = []

    async def process(self, lead, profile):
        self.calls.append(lead.name)
        if lead.name in self.fail_for:
            raise RuntimeError("AI service error")
        return self.outcome


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.prompts = []

    async def create(self, **kwargs):
        self.prompts.append(kwargs["messages"][-1]["content"])
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(content=None, error=None):
    """Minimal object shaped like AsyncOpenAI for chat completions"""
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(content, error)))


@pytest.fixture
def profile():
    return ProductProfile(
        name="AI Outreach Automation",
        value_props=["24/7 outreach", "6x more meetings"],
        ideal_use_cases=["B2B SaaS mid-market", "Technology companies"],
    )


@pytest.fixture
def lead():
    return LeadRecord(
        name="John Doe",
        role="CEO",
        company="TechCorp",
        industry="Technology",
        location="San Francisco",
        bio="Experienced tech leader with 10+ years in SaaS",
    )
