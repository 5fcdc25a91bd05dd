"""Git domain entities."""

from dataclasses import dataclass
from datetime import datetime

SHORT_HASH_LENGTH = 7


@dataclass(frozen=True)
class Commit:
    """Commit entity."""

    hash: str
    author: str
    date: datetime | None
    message: str

    @property
    def short_hash(self) -> str:
        """Abbreviated commit hash, empty when the hash is unknown."""
        return self.hash[:SHORT_HASH_LENGTH]

    def describe(self) -> str:
        """Render the commit as a changelog context line.

        Lines use the ``- <short-hash>: <message>`` form. Commits without a
        hash fall back to ``- <message>``.
        """
        message = self.message.strip()
        if self.short_hash:
            return f"- {self.short_hash}: {message}"
        return f"- {message}"
