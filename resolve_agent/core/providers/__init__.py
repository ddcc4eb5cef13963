"""Oracle backends — one provider class per LLM service."""

from __future__ import annotations

import importlib
from typing import Type

from resolve_agent.core.providers.base import BaseLLMProvider

# First matching prefix wins; anything unmatched goes to Anthropic
_MODEL_PREFIXES = (
    ("gpt-", "openai"),
    ("o1-", "openai"),
    ("o3-", "openai"),
    ("o4-", "openai"),
    ("gemini-", "google"),
    ("ollama/", "ollama"),
)

# provider name -> (module, class, (SDK label, pip extra) or None)
_REGISTRY = {
    "anthropic": ("anthropic", "AnthropicProvider", None),
    "openai": ("openai", "OpenAIProvider", ("OpenAI SDK", "openai")),
    "google": ("google", "GoogleProvider", ("Google GenAI SDK", "google")),
    "ollama": ("ollama", "OllamaProvider", None),
}


def detect_provider(model: str) -> str:
    """Detect the provider name from a model string.

    Returns "anthropic", "openai", "google", or "ollama".
    """
    model_lower = model.lower()
    for prefix, name in _MODEL_PREFIXES:
        if model_lower.startswith(prefix):
            return name
    return "anthropic"


def get_provider_class(name: str) -> Type[BaseLLMProvider]:
    """Return the provider class for the given provider name.

    Provider modules are imported on demand so the optional SDKs
    (openai, google-genai) are only needed when actually used.

    Raises:
        ImportError: If the required SDK is not installed.
        ValueError: If the provider name is unknown.
    """
    try:
        module_name, class_name, optional = _REGISTRY[name]
    except KeyError:
        raise ValueError(f"Unknown provider: {name!r}") from None

    try:
        module = importlib.import_module(f"{__name__}.{module_name}")
    except ImportError as e:
        if optional is None:
            raise
        label, extra = optional
        raise ImportError(
            f"{label} not installed. Install it with: "
            f"pip install resolve-agent[{extra}]"
        ) from e
    return getattr(module, class_name)
