"""Ollama LLM provider — talks to a local Ollama server over HTTP."""

from __future__ import annotations

import json
import logging
import os
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from resolve_agent.core.providers.base import BaseLLMProvider

logger = logging.getLogger(__name__)

DEFAULT_HOST = "http://localhost:11434"
MODEL_PREFIX = "ollama/"


class OllamaProvider(BaseLLMProvider):
    """Provider for models served by Ollama (``ollama/<model>``)."""

    def __init__(
        self,
        model: str,
        timeout: Optional[float] = None,
        host: Optional[str] = None,
    ):
        if model.startswith(MODEL_PREFIX):
            model = model[len(MODEL_PREFIX):]
        super().__init__(model, timeout)
        self.host = (host or os.environ.get("OLLAMA_HOST") or DEFAULT_HOST)
        if not self.host.startswith(("http://", "https://")):
            self.host = f"http://{self.host}"

    def query(self, system_prompt: str, user_prompt: str) -> str:
        payload = {
            "model": self.model,
            "system": system_prompt,
            "prompt": user_prompt,
            "stream": False,
        }
        request = Request(
            url=f"{self.host.rstrip('/')}/api/generate",
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        logger.debug("POST %s/api/generate model=%s", self.host, self.model)
        try:
            with urlopen(request, timeout=self.timeout or 300) as response:
                raw = response.read().decode("utf-8")
        except HTTPError as e:
            body = e.read().decode("utf-8", errors="ignore")
            raise ValueError(f"Ollama returned HTTP {e.code}: {body}") from e
        except URLError as e:
            raise ValueError(
                f"Cannot connect to Ollama at {self.host}: {e.reason}"
            ) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON from Ollama: {raw[:200]}") from e

        text = data.get("response", "")
        if not text:
            raise ValueError(
                "Ollama response did not contain any text. Response: " + raw[:200]
            )
        return text

    @staticmethod
    def check_api_key() -> tuple[bool, str]:
        # A local server needs no key
        return True, "OLLAMA_HOST"
