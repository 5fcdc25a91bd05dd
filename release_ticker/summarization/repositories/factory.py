"""Factory for creating LLM agent instances."""

from release_ticker.config import Settings
from release_ticker.summarization.repositories.implementations import (
    HuggingFaceInferenceAgent,
    LangChainClaudeAgent,
    LangChainOpenAIAgent,
)
from release_ticker.summarization.repositories.interfaces import LLMAgentRepository


def create_llm_agent(settings: Settings) -> LLMAgentRepository:
    """
    Create an LLM agent instance based on configuration.

    Args:
        settings: Run configuration; ``settings.provider`` selects the agent

    Returns:
        LLM agent instance (Hugging Face, Claude or OpenAI)

    Raises:
        ValueError: If the provider is invalid or its API key is missing
    """
    if settings.provider == "huggingface":
        return HuggingFaceInferenceAgent(
            api_key=settings.api_key,
            model_name=settings.model,
            api_url=settings.huggingface_api_url,
            timeout=settings.request_timeout,
        )
    elif settings.provider == "anthropic":
        return LangChainClaudeAgent(
            api_key=settings.api_key,
            model_name=settings.model,
            timeout=settings.request_timeout,
        )
    elif settings.provider == "openai":
        return LangChainOpenAIAgent(
            api_key=settings.api_key,
            model_name=settings.model,
            timeout=settings.request_timeout,
        )
    else:
        raise ValueError(
            f"Invalid LLM_PROVIDER: {settings.provider}. "
            "Supported values: 'huggingface', 'anthropic', 'openai'"
        )
