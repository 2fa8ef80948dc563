"""
Tests for the oracle LLM factory.
"""
from unittest.mock import Mock, patch

import pytest

from tag_autocompletion.exceptions import ConfigurationError
from tag_autocompletion.llm_factory import get_llm_instance


class TestGetLlmInstance:
    """Tests for get_llm_instance."""

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            get_llm_instance("mystery", "model")

    def test_groq_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("GROQ_API_KEY", raising=False)
        with patch("tag_autocompletion.llm_factory.ChatGroq", Mock()):
            with pytest.raises(ConfigurationError, match="GROQ_API_KEY"):
                get_llm_instance("groq", "llama-3.1-8b-instant")

    def test_groq_is_deterministic(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_live_key_1234567890")
        chat_groq = Mock()
        with patch("tag_autocompletion.llm_factory.ChatGroq", chat_groq):
            get_llm_instance("GROQ", "llama-3.1-8b-instant")

        chat_groq.assert_called_once_with(
            model="llama-3.1-8b-instant",
            api_key="gsk_live_key_1234567890",
            temperature=0,
            streaming=False,
        )

    def test_missing_integration_raises_import_error(self):
        with patch("tag_autocompletion.llm_factory.ChatOllama", None):
            with pytest.raises(ImportError):
                get_llm_instance("ollama", "llama3")
