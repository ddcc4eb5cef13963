"""Oracle client — provider-agnostic text completion for command planning."""

from __future__ import annotations

import logging
import os
from typing import Optional

from resolve_agent.core.exceptions import OracleError
from resolve_agent.core.providers import detect_provider, get_provider_class

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"

_PROMPTS_DIR = os.path.join(
    os.path.dirname(os.path.dirname(__file__)), "prompts"
)


def _load_prompt(name: str) -> str:
    path = os.path.join(_PROMPTS_DIR, name)
    with open(path) as f:
        return f.read()


def load_system_prompt() -> str:
    """Return the system prompt used for every resolution query."""
    return _load_prompt("resolve.txt")


class OracleClient:
    """Provider-agnostic client exposing ``query(system, user) -> text``."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        timeout: Optional[float] = None,
        ollama_host: Optional[str] = None,
    ):
        self.model = model
        self.provider_name = detect_provider(model)
        provider_class = get_provider_class(self.provider_name)
        if self.provider_name == "ollama":
            self.provider = provider_class(model, timeout, host=ollama_host)
        else:
            self.provider = provider_class(model, timeout)

    def query(self, system_prompt: str, user_prompt: str) -> str:
        """Ask the backend for a completion.

        Raises:
            OracleError: If the backend fails for any reason (network,
                authentication, empty reply).
        """
        logger.debug(
            "Querying %s (%s), prompt length %d",
            self.provider_name, self.model, len(user_prompt),
        )
        try:
            text = self.provider.query(system_prompt, user_prompt)
        except Exception as e:
            logger.warning("Oracle query failed: %s", e)
            raise OracleError(f"{self.provider_name} query failed: {e}") from e

        if not text or not text.strip():
            raise OracleError(f"{self.provider_name} returned an empty response")
        return text
