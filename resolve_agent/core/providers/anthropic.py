"""Anthropic (Claude) LLM provider."""

from __future__ import annotations

import os
from typing import Optional

import anthropic

from resolve_agent.core.providers.base import BaseLLMProvider


class AnthropicProvider(BaseLLMProvider):
    """Provider for Anthropic Claude models."""

    def __init__(self, model: str, timeout: Optional[float] = None):
        super().__init__(model, timeout)
        if timeout is not None:
            self.client = anthropic.Anthropic(timeout=timeout)
        else:
            self.client = anthropic.Anthropic()

    def query(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=4096,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )

        text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        if not text.strip():
            raise ValueError(
                "LLM response did not contain any text. "
                "Response: " + str(response.content)
            )
        return text

    @staticmethod
    def check_api_key() -> tuple[bool, str]:
        return bool(os.environ.get("ANTHROPIC_API_KEY")), "ANTHROPIC_API_KEY"
