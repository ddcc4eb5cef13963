"""OpenAI LLM provider."""

from __future__ import annotations

import os
from typing import Optional

import openai

from resolve_agent.core.providers.base import BaseLLMProvider


class OpenAIProvider(BaseLLMProvider):
    """Provider for OpenAI models (GPT-4o, o1, o3, etc.)."""

    def __init__(self, model: str, timeout: Optional[float] = None):
        super().__init__(model, timeout)
        if timeout is not None:
            self.client = openai.OpenAI(timeout=timeout)
        else:
            self.client = openai.OpenAI()

    def query(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=4096,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )

        choice = response.choices[0].message
        if choice.content:
            return choice.content

        raise ValueError(
            "OpenAI response did not contain any text. "
            "Response: " + str(choice)
        )

    @staticmethod
    def check_api_key() -> tuple[bool, str]:
        return bool(os.environ.get("OPENAI_API_KEY")), "OPENAI_API_KEY"
