"""Coding Assistant — answers IDE help requests within the hackathon's AI policy.

Invariants:
    - strict AI level → PermissionDeniedError, no model call, no canned answer
    - moderate level asks the model for hints only (no complete solutions)
    - No API key configured → deterministic keyword guidance (core.assistant_guidance)
    - Code context sent to the model is truncated to MAX_CONTEXT_CHARS

Design Decisions:
    - Falls back to guidance only when the assistant is unconfigured; API failures
      propagate as AssistantAPIError (503) so outages are visible
"""

import logging

from hackshield.config import get_settings
from hackshield.core.assistant_guidance import guidance_for
from hackshield.core.domain_types import AIAssistanceLevel
from hackshield.core.errors import ErrorContext, PermissionDeniedError
from hackshield.infrastructure.anthropic_client import ResilientAnthropicClient

logger = logging.getLogger(__name__)

MAX_CONTEXT_CHARS = 12_000

_BASE_PROMPT = (
    "You are a coding assistant inside a proctored hackathon IDE. "
    "Answer concisely and focus on the participant's current file."
)
_LEVEL_RULES = {
    AIAssistanceLevel.MODERATE: (
        "Give hints, explanations and small snippets. Do not write complete "
        "features or full solutions."
    ),
    AIAssistanceLevel.PERMISSIVE: "You may provide complete code when asked.",
}


def build_system_prompt(level: AIAssistanceLevel, prohibited: list[str] | None = None) -> str:
    parts = [_BASE_PROMPT, _LEVEL_RULES.get(level, "")]
    if prohibited:
        parts.append(f"Never suggest these prohibited technologies: {', '.join(prohibited)}.")
    return " ".join(p for p in parts if p)


def build_user_message(query: str, context: dict | None) -> str:
    context = context or {}
    lines = [query]
    if context.get("current_file"):
        lines.append(f"\nCurrent file: {context['current_file']}")
    if context.get("language"):
        lines.append(f"Language: {context['language']}")
    if context.get("code"):
        lines.append(f"\n```\n{context['code'][:MAX_CONTEXT_CHARS]}\n```")
    return "\n".join(lines)


class CodingAssistant:
    def __init__(self, client: ResilientAnthropicClient | None, model: str, max_tokens: int):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    async def answer(
        self,
        query: str,
        context: dict | None,
        level: AIAssistanceLevel = AIAssistanceLevel.MODERATE,
        prohibited: list[str] | None = None,
        hackathon_id: str | None = None,
    ) -> dict:
        if level == AIAssistanceLevel.STRICT:
            raise PermissionDeniedError(
                "AI assistance is disabled for this hackathon", code="AI_ASSISTANCE_DISABLED",
            )
        if self.client is None:
            return {"response": guidance_for(query, context), "source": "guidance", "success": True}

        response = await self.client.create_message(
            model=self.model,
            max_tokens=self.max_tokens,
            system=build_system_prompt(level, prohibited),
            messages=[{"role": "user", "content": build_user_message(query, context)}],
            context=ErrorContext(hackathon_id=hackathon_id),
        )
        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        return {"response": text, "source": "model", "success": True}


_assistant: CodingAssistant | None = None


def get_assistant() -> CodingAssistant:
    """FastAPI dependency; a single client per process."""
    global _assistant
    if _assistant is None:
        settings = get_settings()
        client = None
        if settings.assistant_enabled:
            client = ResilientAnthropicClient(
                api_key=settings.anthropic_api_key,
                max_retries=settings.anthropic_max_retries,
                base_delay_ms=settings.anthropic_base_delay_ms,
                max_delay_ms=settings.anthropic_max_delay_ms,
                timeout_seconds=settings.anthropic_timeout_seconds,
            )
        _assistant = CodingAssistant(client, settings.assistant_model, settings.assistant_max_tokens)
    return _assistant
