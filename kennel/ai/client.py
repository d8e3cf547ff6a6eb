"""Thin async wrapper over the Anthropic Messages API."""

import logging
import os
from typing import Optional

import anthropic

from kennel.errors import MalformedResponseError

logger = logging.getLogger(__name__)

CLAUDE_MODEL = os.getenv("CLAUDE_MODEL", "claude-haiku-4-5-20251001")
MAX_TOKENS = int(os.getenv("ANALYZER_MAX_TOKENS", "2000"))
REQUEST_TIMEOUT = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
# Low temperature keeps repeated reports on the same data consistent
TEMPERATURE = 0.3


class LLMClient:
    """One prompt in, one narrative out. Retries are the caller's job."""

    def __init__(
        self,
        client: Optional[anthropic.AsyncAnthropic] = None,
        *,
        model: str = CLAUDE_MODEL,
        max_tokens: int = MAX_TOKENS,
        temperature: float = TEMPERATURE,
    ):
        # SDK retries disabled: the orchestrator owns the retry budget
        self._client = client or anthropic.AsyncAnthropic(timeout=REQUEST_TIMEOUT, max_retries=0)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def complete(self, system: str, prompt: str) -> str:
        message = await self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )
        for block in getattr(message, "content", None) or []:
            text = getattr(block, "text", None)
            if isinstance(text, str) and text.strip():
                return text
        raise MalformedResponseError("LLM response contained no text block")
