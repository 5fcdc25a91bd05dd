"""Repository interfaces for LLM summarization operations."""

from abc import ABC, abstractmethod

from release_ticker.summarization.domain.value_objects import SummaryPrompt


class LLMAgentRepository(ABC):
    """Interface for a text-generation service that can summarize changes."""

    @abstractmethod
    def generate(self, prompt: SummaryPrompt) -> str | None:
        """
        Generate text for a prompt.

        Args:
            prompt: System and user messages for the call

        Returns:
            The generated text, or None if the response carried no text

        Raises:
            RuntimeError: If the call fails (network, HTTP status, auth, timeout,
                or an undecodable response)
        """
        ...
