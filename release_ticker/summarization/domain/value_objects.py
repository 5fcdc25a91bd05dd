"""Value objects for Summarization domain."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Chunk:
    """A bounded slice of the text sent to the summarizer.

    Attributes:
        index: Zero-based position of the chunk
        total: Number of chunks produced from the same text
        text: The chunk content
    """

    index: int
    total: int
    text: str

    @property
    def label(self) -> str:
        """Human-readable position, e.g. ``Part 2 of 3``."""
        return f"Part {self.index + 1} of {self.total}"


@dataclass(frozen=True)
class SummaryPrompt:
    """Prompt for a single summarization call."""

    system: str
    user: str


@dataclass(frozen=True)
class ChunkSummary:
    """Outcome of summarizing one chunk.

    Attributes:
        index: Index of the summarized chunk
        text: Cleaned summary text, None when the provider returned nothing usable
        failed: True when the call raised (network, HTTP status, timeout, ...)
    """

    index: int
    text: str | None = None
    failed: bool = False
