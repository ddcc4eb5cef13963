"""Tests for the Google Gemini provider."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from resolve_agent.core.providers.google import GoogleProvider


@pytest.fixture
def mock_genai():
    with patch("resolve_agent.core.providers.google.genai") as genai, \
            patch("resolve_agent.core.providers.google.types") as types:
        yield genai, types


class TestGoogleProvider:
    def test_query_returns_text(self, mock_genai):
        genai, _ = mock_genai
        response = MagicMock()
        response.text = "pip install numpy==1.26.0"
        genai.Client.return_value.models.generate_content.return_value = (
            response
        )

        provider = GoogleProvider("gemini-2.5-pro")
        assert provider.query("sys", "msg") == "pip install numpy==1.26.0"

    def test_system_prompt_goes_into_config(self, mock_genai):
        genai, types = mock_genai
        response = MagicMock()
        response.text = "ok"
        genai.Client.return_value.models.generate_content.return_value = (
            response
        )

        GoogleProvider("gemini-2.5-pro").query("sys prompt", "user msg")

        types.GenerateContentConfig.assert_called_once_with(
            system_instruction="sys prompt"
        )
        types.Part.from_text.assert_called_once_with(text="user msg")
        call_kwargs = (
            genai.Client.return_value.models.generate_content.call_args[1]
        )
        assert call_kwargs["model"] == "gemini-2.5-pro"

    def test_raises_on_empty_text(self, mock_genai):
        genai, _ = mock_genai
        response = MagicMock()
        response.text = None
        genai.Client.return_value.models.generate_content.return_value = (
            response
        )

        provider = GoogleProvider("gemini-2.5-pro")
        with pytest.raises(ValueError, match="did not contain any text"):
            provider.query("sys", "msg")

    def test_timeout_converted_to_milliseconds(self, mock_genai):
        genai, types = mock_genai
        GoogleProvider("gemini-2.5-pro", timeout=2.5)
        types.HttpOptions.assert_called_once_with(timeout=2500)
        genai.Client.assert_called_once_with(
            http_options=types.HttpOptions.return_value
        )

    def test_check_api_key(self):
        with patch.dict("os.environ", {"GOOGLE_API_KEY": "key"}):
            assert GoogleProvider.check_api_key() == (True, "GOOGLE_API_KEY")
        with patch.dict("os.environ", {}, clear=True):
            assert GoogleProvider.check_api_key() == (False, "GOOGLE_API_KEY")
