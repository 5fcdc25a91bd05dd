"""Runtime configuration loaded from the environment and .env files."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

DEFAULT_PROVIDER = "huggingface"
DEFAULT_MODELS: dict[str, str] = {
    "huggingface": "microsoft/Phi-3-mini-4k-instruct",
    "anthropic": "claude-3-5-sonnet-20241022",
    "openai": "gpt-4-turbo-preview",
}
PROVIDER_ALIASES: dict[str, str] = {
    "huggingface": "huggingface",
    "hf": "huggingface",
    "anthropic": "anthropic",
    "claude": "anthropic",
    "openai": "openai",
    "gpt": "openai",
}
API_KEY_VARIABLES: dict[str, str] = {
    "huggingface": "HUGGINGFACE_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}
DEFAULT_HUGGINGFACE_API_URL = (
    "https://router.huggingface.co/hf-inference/models/{model}/v1/chat/completions"
)
DEFAULT_CHANGELOG_FILE = "RELEASE.md"
DEFAULT_MAX_CHUNK_SIZE = 2000
DEFAULT_MAX_CONCURRENCY = 1
DEFAULT_REQUEST_TIMEOUT = 60.0
DEFAULT_GIT_TIMEOUT = 120.0
DEFAULT_LOCK_TIMEOUT = 30.0


def _load_env_file() -> None:
    """Load environment variables from .env file."""
    # Try to find .env file in project root (parent of release_ticker package)
    project_root = Path(__file__).parent.parent
    env_file = project_root / ".env"
    if env_file.exists():
        load_dotenv(env_file)
    else:
        # Fallback: try current directory
        load_dotenv()


def normalize_provider(provider: str) -> str:
    """
    Map a provider name or alias to its canonical name.

    Args:
        provider: Provider name as given by the user

    Returns:
        Canonical provider name

    Raises:
        ValueError: If the provider is not supported
    """
    canonical = PROVIDER_ALIASES.get(provider.strip().lower())
    if canonical is None:
        raise ValueError(
            f"Invalid LLM_PROVIDER: {provider}. "
            f"Supported values: {', '.join(repr(name) for name in PROVIDER_ALIASES)}"
        )
    return canonical


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _positive_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value:g}")
    return value


@dataclass(frozen=True)
class Settings:
    """Configuration for one release-notes run.

    Attributes:
        provider: Canonical LLM provider name
        model: Model identifier sent to the provider
        api_key: Credential for the provider
        huggingface_api_url: Endpoint template, ``{model}`` is substituted
        max_chunk_size: Maximum characters per summarization call
        max_concurrency: Number of chunks summarized in parallel
        request_timeout: Seconds before an LLM call is abandoned
        git_timeout: Seconds before a git command is abandoned
        changelog_file: Changelog path, relative paths resolve against the repo
        lock_timeout: Seconds to wait for the changelog write lock
        slack_token: Optional Slack bot token for release announcements
        slack_channel: Optional Slack channel for release announcements
    """

    provider: str
    model: str
    api_key: str
    huggingface_api_url: str = DEFAULT_HUGGINGFACE_API_URL
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    git_timeout: float = DEFAULT_GIT_TIMEOUT
    changelog_file: Path = Path(DEFAULT_CHANGELOG_FILE)
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    slack_token: str | None = None
    slack_channel: str | None = None

    def __post_init__(self) -> None:
        """Validate the settings."""
        if not self.api_key:
            variable = API_KEY_VARIABLES.get(self.provider, "API key")
            raise ValueError(
                f"{variable} environment variable is required. "
                "Please set it in a .env file or as an environment variable. "
                "See .env.example for reference."
            )
        if not self.model:
            raise ValueError("Model name must be a non-empty string")
        if self.max_chunk_size < 1:
            raise ValueError("max_chunk_size must be positive")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> "Settings":
        """
        Build settings from the environment.

        Values come from, in increasing priority: built-in defaults, the .env
        file, the process environment, and keyword overrides (CLI flags).
        Overrides set to None are ignored.

        Args:
            **overrides: Field values that take precedence over the environment

        Returns:
            Validated settings

        Raises:
            ValueError: If a value is invalid or the provider credential is missing
        """
        _load_env_file()
        overrides = {key: value for key, value in overrides.items() if value is not None}

        provider = normalize_provider(
            overrides.pop("provider", None) or os.getenv("LLM_PROVIDER", DEFAULT_PROVIDER)
        )
        model = (
            overrides.pop("model", None)
            or os.getenv("RELEASE_MODEL")
            or DEFAULT_MODELS[provider]
        )
        api_key = overrides.pop("api_key", None) or os.getenv(API_KEY_VARIABLES[provider], "")

        values: dict[str, Any] = {
            "huggingface_api_url": os.getenv(
                "HUGGINGFACE_API_URL", DEFAULT_HUGGINGFACE_API_URL
            ),
            "max_chunk_size": _positive_int(
                "RELEASE_MAX_CHUNK_SIZE",
                os.getenv("RELEASE_MAX_CHUNK_SIZE", str(DEFAULT_MAX_CHUNK_SIZE)),
            ),
            "max_concurrency": _positive_int(
                "RELEASE_MAX_CONCURRENCY",
                os.getenv("RELEASE_MAX_CONCURRENCY", str(DEFAULT_MAX_CONCURRENCY)),
            ),
            "request_timeout": _positive_float(
                "RELEASE_REQUEST_TIMEOUT",
                os.getenv("RELEASE_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT)),
            ),
            "git_timeout": _positive_float(
                "RELEASE_GIT_TIMEOUT",
                os.getenv("RELEASE_GIT_TIMEOUT", str(DEFAULT_GIT_TIMEOUT)),
            ),
            "changelog_file": Path(os.getenv("RELEASE_FILE", DEFAULT_CHANGELOG_FILE)),
            "lock_timeout": _positive_float(
                "RELEASE_LOCK_TIMEOUT",
                os.getenv("RELEASE_LOCK_TIMEOUT", str(DEFAULT_LOCK_TIMEOUT)),
            ),
            "slack_token": os.getenv("SLACK_TOKEN") or None,
            "slack_channel": os.getenv("RELEASE_SLACK_CHANNEL") or None,
        }
        values.update(overrides)

        return cls(provider=provider, model=model, api_key=api_key, **values)

