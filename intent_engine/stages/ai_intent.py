"""
AI Intent Stage
===============
Asks an LLM to rate a lead's buying intent as High, Medium or Low.

The external call is unreliable and returns free text, so this stage never
raises to the caller:
- transport errors become a Low outcome
- malformed responses fall back to a keyword scan of the raw text
Only a missing API key fails, and it fails at construction time.
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from ..models.schemas import (
    LeadRecord,
    ProductProfile,
    AIOutcome,
    AIIntentResponse,
    IntentLabel,
)
from ..config.settings import LLM_CONFIG, AI_INTENT_SCORES
from ..exceptions import ConfigurationError, MalformedAIResponse

logger = logging.getLogger(__name__)

TRANSPORT_FALLBACK_REASONING = "AI request failed, using low score"
PARSE_FALLBACK_REASONING = "AI response could not be parsed, using keyword fallback"


class AIIntentStage:
    """
    Score buying intent through a single LLM call per lead.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        client=None,
    ):
        """
        Initialize LLM client.

        Args:
            api_key: API key for LLM provider (defaults to environment)
            provider: LLM provider ("openrouter" or "openai")
            model: Model name in the provider's format
            client: Pre-built async client exposing chat.completions.create

        Raises:
            ConfigurationError: if no client is given and no API key is configured
        """
        self.provider = provider or LLM_CONFIG.get("provider", "openrouter")
        self.model = model or LLM_CONFIG.get("model")
        self.api_key = api_key or LLM_CONFIG.get("api_key")

        if client is not None:
            self.client = client
        else:
            if not self.api_key:
                raise ConfigurationError(
                    "Missing LLM API key: set OPENROUTER_API_KEY (or OPENAI_API_KEY) in .env"
                )
            self.client = self._initialize_client()

        logger.info("AI intent stage ready (provider=%s, model=%s)", self.provider, self.model)

    def _initialize_client(self):
        """Initialize the async LLM client based on provider"""
        from openai import AsyncOpenAI

        if self.provider == "openrouter":
            return AsyncOpenAI(
                api_key=self.api_key,
                base_url=LLM_CONFIG.get("base_url", "https://openrouter.ai/api/v1"),
                timeout=LLM_CONFIG.get("timeout"),
                default_headers={
                    "HTTP-Referer": LLM_CONFIG.get("site_url", "http://localhost:8000"),
                    "X-Title": LLM_CONFIG.get("app_name", "Lead Intent Scoring Engine"),
                },
            )
        elif self.provider == "openai":
            return AsyncOpenAI(api_key=self.api_key, timeout=LLM_CONFIG.get("timeout"))

        raise ConfigurationError(f"Unknown LLM provider: {self.provider}")

    async def process(self, lead: LeadRecord, profile: ProductProfile) -> AIOutcome:
        """
        Rate a lead's buying intent.

        Args:
            lead: Lead to rate
            profile: Product the lead would be buying

        Returns:
            AIOutcome, degraded to a fallback on any failure
        """
        try:
            prompt = self._generate_prompt(lead, profile)
            text = await self._call_llm(prompt)
        except Exception as e:
            logger.error("AI request failed for %s: %s", lead.name, e)
            return _fallback_outcome(IntentLabel.LOW, TRANSPORT_FALLBACK_REASONING)

        outcome = self._parse_response(text)
        logger.info("AI scored %s: %s", lead.name, outcome.intent.value)
        return outcome

    def _generate_prompt(self, lead: LeadRecord, profile: ProductProfile) -> str:
        """Generate the LLM prompt with product and lead context"""
        return f"""Analyze this lead's buying intent for the product.

PRODUCT: {profile.name}
Value: {', '.join(profile.value_props)}
Target: {', '.join(profile.ideal_use_cases)}

LEAD:
Name: {lead.name}
Role: {lead.role}
Company: {lead.company}
Industry: {lead.industry}
Location: {lead.location}
Bio: {lead.bio or 'Not provided'}

Rate their buying intent as High, Medium, or Low.

Respond with JSON only:
{{
  "intent": "High|Medium|Low",
  "reasoning": "1-2 sentence explanation"
}}"""

    async def _call_llm(self, prompt: str) -> str:
        """Call the LLM API"""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": "You are a B2B sales analyst. Always respond with valid JSON only."},
                {"role": "user", "content": prompt},
            ],
            temperature=LLM_CONFIG.get("temperature", 0.3),
            max_tokens=LLM_CONFIG.get("max_tokens", 300),
        )
        return response.choices[0].message.content or ""

    def _parse_response(self, text: str) -> AIOutcome:
        """Parse LLM response, falling back to keywords when it is malformed"""
        try:
            parsed = self._extract_payload(text)
        except MalformedAIResponse as e:
            logger.warning("AI response malformed (%s), using keyword fallback", e)
            return self._keyword_fallback(text)

        label = IntentLabel(parsed.intent)
        return AIOutcome(
            intent=label,
            reasoning=parsed.reasoning,
            ai_score=AI_INTENT_SCORES[label.value],
        )

    def _extract_payload(self, text: str) -> AIIntentResponse:
        """Pull the first JSON object out of the text and validate it"""
        candidate = find_json_object(text or "")
        if candidate is None:
            raise MalformedAIResponse("no JSON object found")

        try:
            data = json.loads(candidate)
            return AIIntentResponse.model_validate(data)
        except json.JSONDecodeError as e:
            raise MalformedAIResponse(f"invalid JSON: {e.msg}") from e
        except ValidationError as e:
            raise MalformedAIResponse(f"invalid fields: {e.error_count()} error(s)") from e

    def _keyword_fallback(self, text: str) -> AIOutcome:
        """Guess the label from words in the raw response"""
        lower_text = (text or "").lower()

        if "high" in lower_text or "strong" in lower_text:
            label = IntentLabel.HIGH
        elif "medium" in lower_text or "moderate" in lower_text:
            label = IntentLabel.MEDIUM
        else:
            label = IntentLabel.LOW

        return _fallback_outcome(label, PARSE_FALLBACK_REASONING)


# =============================================================================
# Helpers
# =============================================================================

def _fallback_outcome(label: IntentLabel, reasoning: str) -> AIOutcome:
    return AIOutcome(
        intent=label,
        reasoning=reasoning,
        ai_score=AI_INTENT_SCORES[label.value],
        is_fallback=True,
    )


def find_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} substring, or None.

    Braces inside JSON string literals do not count towards nesting.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        start = text.find("{", start + 1)
    return None
