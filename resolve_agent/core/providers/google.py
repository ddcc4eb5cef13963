"""Google Gemini LLM provider."""

from __future__ import annotations

import os
from typing import Optional

from google import genai
from google.genai import types

from resolve_agent.core.providers.base import BaseLLMProvider


class GoogleProvider(BaseLLMProvider):
    """Provider for Google Gemini models."""

    def __init__(self, model: str, timeout: Optional[float] = None):
        super().__init__(model, timeout)
        if timeout is not None:
            # HttpOptions takes milliseconds
            self.client = genai.Client(
                http_options=types.HttpOptions(timeout=int(timeout * 1000)),
            )
        else:
            self.client = genai.Client()

    def query(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.models.generate_content(
            model=self.model,
            contents=[
                types.Content(
                    role="user",
                    parts=[types.Part.from_text(text=user_prompt)],
                ),
            ],
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
            ),
        )

        if response.text:
            return response.text

        raise ValueError(
            "Gemini response did not contain any text. "
            "Response: " + str(response)
        )

    @staticmethod
    def check_api_key() -> tuple[bool, str]:
        return bool(os.environ.get("GOOGLE_API_KEY")), "GOOGLE_API_KEY"
