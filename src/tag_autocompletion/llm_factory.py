import logging
from typing import Any

from .config_validator import get_optional_env, get_required_env

# Provider integrations are optional extras
try:
    from langchain_groq import ChatGroq
except ImportError:
    ChatGroq = None

try:
    from langchain_openai import ChatOpenAI
except ImportError:
    ChatOpenAI = None

try:
    from langchain_ollama import ChatOllama
except ImportError:
    ChatOllama = None

logger = logging.getLogger(__name__)


def get_llm_instance(provider: str, model: str) -> Any:
    """
    Factory to return a ready-to-use chat model for the tag oracle.

    Oracle calls are short classification-style prompts, so temperature is 0
    and streaming is off.

    :param provider: 'groq', 'openai' or 'ollama'
    :param model: LLM model name
    :return: LangChain chat model instance
    """
    provider = provider.lower()

    if provider == "groq":
        if ChatGroq is None:
            raise ImportError("langchain_groq not installed")

        api_key = get_required_env(
            "GROQ_API_KEY",
            description="Groq API key for the tag oracle (get from https://console.groq.com/keys)"
        )

        known_groq_models = [
            "llama-3.1-8b-instant",
            "llama-3.3-70b-versatile",
            "qwen/qwen3-32b",
        ]
        if model not in known_groq_models:
            # Warn but don't fail - Groq adds models frequently
            logger.warning(
                f"Model '{model}' not in known Groq models. Known models: {known_groq_models}"
            )

        return ChatGroq(
            model=model,
            api_key=api_key,
            temperature=0,
            streaming=False,
        )

    elif provider == "openai":
        if ChatOpenAI is None:
            raise ImportError("langchain_openai not installed")
        api_key = get_required_env(
            "OPENAI_API_KEY",
            description="OpenAI API key for the tag oracle (get from https://platform.openai.com/api-keys)"
        )
        return ChatOpenAI(
            model=model,
            api_key=api_key,
            temperature=0,
            streaming=False,
        )

    elif provider == "ollama":
        if ChatOllama is None:
            raise ImportError("langchain_ollama not installed")
        return ChatOllama(
            model=model,
            base_url=get_optional_env("OLLAMA_BASE_URL", default="http://localhost:11434"),
            temperature=0,
        )

    else:
        raise ValueError(f"Unknown LLM provider: {provider}")
