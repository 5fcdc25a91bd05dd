"""Concrete implementations of LLM summarization."""

import httpx
from langchain_anthropic import ChatAnthropic
from langchain_openai import ChatOpenAI

from release_ticker.config import DEFAULT_HUGGINGFACE_API_URL, DEFAULT_MODELS
from release_ticker.summarization.domain.responses import extract_generated_text
from release_ticker.summarization.domain.value_objects import SummaryPrompt
from release_ticker.summarization.repositories.base_langchain_agent import (
    BaseLangChainAgent,
)
from release_ticker.summarization.repositories.interfaces import LLMAgentRepository

TEMPERATURE = 0.3  # Lower temperature for more consistent summaries
MAX_OUTPUT_TOKENS = 500


class HuggingFaceInferenceAgent(LLMAgentRepository):
    """Hugging Face Inference API client for release note generation."""

    def __init__(
        self,
        api_key: str,
        model_name: str | None = None,
        api_url: str = DEFAULT_HUGGINGFACE_API_URL,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the Hugging Face agent.

        Args:
            api_key: Hugging Face access token, sent as a bearer credential
            model_name: Optional model name override. Defaults to
                microsoft/Phi-3-mini-4k-instruct
            api_url: Endpoint template, ``{model}`` is replaced by the model name
            timeout: Seconds before a request is abandoned
            client: Optional preconfigured HTTP client
        """
        if not api_key:
            raise ValueError(
                "HUGGINGFACE_API_KEY environment variable is required. "
                "Please set it in a .env file or as an environment variable. "
                "See .env.example for reference."
            )

        self._model = model_name or DEFAULT_MODELS["huggingface"]
        self._url = api_url.format(model=self._model)
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout))
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def generate(self, prompt: SummaryPrompt) -> str | None:
        """
        Generate release notes for a prompt.

        Args:
            prompt: System and user messages for the call

        Returns:
            The generated text, or None if the response carried no text

        Raises:
            RuntimeError: If the request fails or the response is not JSON
        """
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
            "max_tokens": MAX_OUTPUT_TOKENS,
            "temperature": TEMPERATURE,
            "stream": False,
        }

        try:
            response = self._client.post(self._url, json=payload, headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RuntimeError(
                f"Hugging Face API returned {e.response.status_code}: "
                f"{e.response.text[:500]}"
            ) from e
        except httpx.HTTPError as e:
            raise RuntimeError(f"Hugging Face API request failed: {e}") from e

        if not response.content.strip():
            return None

        try:
            data = response.json()
        except ValueError as e:
            raise RuntimeError(f"Hugging Face API returned invalid JSON: {e}") from e

        return extract_generated_text(data)


class LangChainClaudeAgent(BaseLangChainAgent):
    """LangChain implementation using Claude for release note generation."""

    def __init__(
        self, api_key: str, model_name: str | None = None, timeout: float = 60.0
    ) -> None:
        """
        Initialize the Claude agent.

        Args:
            api_key: Anthropic API key
            model_name: Optional model name override. Defaults to claude-3-5-sonnet-20241022
            timeout: Seconds before a request is abandoned
        """
        if not api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY environment variable is required. "
                "Please set it in a .env file or as an environment variable. "
                "See .env.example for reference."
            )

        self._llm = ChatAnthropic(  # type: ignore[call-arg]
            model_name=model_name or DEFAULT_MODELS["anthropic"],
            api_key=api_key,
            temperature=TEMPERATURE,
            max_tokens=MAX_OUTPUT_TOKENS,
            timeout=timeout,
        )

        super().__init__()


class LangChainOpenAIAgent(BaseLangChainAgent):
    """LangChain implementation using OpenAI for release note generation."""

    def __init__(
        self, api_key: str, model_name: str | None = None, timeout: float = 60.0
    ) -> None:
        """
        Initialize the OpenAI agent.

        Args:
            api_key: OpenAI API key
            model_name: Optional model name override. Defaults to gpt-4-turbo-preview
            timeout: Seconds before a request is abandoned
        """
        if not api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable is required. "
                "Please set it in a .env file or as an environment variable. "
                "See .env.example for reference."
            )

        self._llm = ChatOpenAI(  # type: ignore[call-arg]
            model_name=model_name or DEFAULT_MODELS["openai"],
            api_key=api_key,
            temperature=TEMPERATURE,
            max_tokens=MAX_OUTPUT_TOKENS,
            timeout=timeout,
        )

        super().__init__()
