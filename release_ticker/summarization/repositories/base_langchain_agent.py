"""Base class for LangChain-based LLM agents."""

from abc import ABC
from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

from release_ticker.summarization.domain.value_objects import SummaryPrompt
from release_ticker.summarization.repositories.interfaces import LLMAgentRepository

if TYPE_CHECKING:
    from langchain_core.language_models.chat_models import BaseChatModel


class BaseLangChainAgent(LLMAgentRepository, ABC):
    """Base class for LangChain-based release note agents."""

    def __init__(self) -> None:
        """Initialize the base agent."""
        self._llm: BaseChatModel  # Set by subclasses

    def generate(self, prompt: SummaryPrompt) -> str | None:
        """
        Generate release notes for a prompt.

        Args:
            prompt: System and user messages for the call

        Returns:
            The generated text, or None if the model returned no text

        Raises:
            RuntimeError: If the LLM API call fails
        """
        try:
            messages = [
                SystemMessage(content=prompt.system),
                HumanMessage(content=prompt.user),
            ]
            response = self._llm.invoke(messages)
        except Exception as e:
            raise RuntimeError(f"Failed to generate release notes: {str(e)}") from e

        text = self._content_to_text(response.content)
        return text if text.strip() else None

    @staticmethod
    def _content_to_text(content: object) -> str:
        """Flatten LangChain message content into plain text."""
        if isinstance(content, str):
            return content
        elif isinstance(content, list):
            # Content blocks: plain strings or dicts with a "text" key
            return " ".join(
                item if isinstance(item, str) else str(item.get("text", ""))
                for item in content
            )
        elif content is None:
            return ""
        else:
            return str(content)
