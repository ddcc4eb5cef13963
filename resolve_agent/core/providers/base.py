"""Base class for LLM providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class BaseLLMProvider(ABC):
    """Abstract base for provider implementations.

    Every backend exposes the same call shape: a system prompt and a user
    prompt in, plain completion text out.
    """

    def __init__(self, model: str, timeout: Optional[float] = None):
        self.model = model
        self.timeout = timeout

    @abstractmethod
    def query(self, system_prompt: str, user_prompt: str) -> str:
        """Send one completion request and return the response text.

        Args:
            system_prompt: Instructions for the model.
            user_prompt: The request for this turn.

        Returns:
            The text of the model's reply.

        Raises:
            ValueError: If the response carries no text.
        """

    @staticmethod
    @abstractmethod
    def check_api_key() -> tuple[bool, str]:
        """Check whether the required API key is set.

        Returns:
            (is_set, env_var_name), e.g. (True, "ANTHROPIC_API_KEY").
        """
