"""Value objects for the changelog domain."""

import re
from dataclasses import dataclass
from datetime import date

_VERSION_PATTERN = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)")


@dataclass(frozen=True, order=True)
class Version:
    """Semantic version ``major.minor.patch``."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    def __post_init__(self) -> None:
        """Validate the components."""
        if min(self.major, self.minor, self.patch) < 0:
            raise ValueError(f"Version components must be non-negative: {self}")

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Parse a ``M.m.p`` string.

        Args:
            text: Version string, e.g. ``"1.4.9"``

        Returns:
            The parsed version

        Raises:
            ValueError: If the text is not three dot-separated non-negative integers
        """
        match = _VERSION_PATTERN.fullmatch(text.strip())
        if match is None:
            raise ValueError(f"Invalid version: {text!r}")
        major, minor, patch = (int(part) for part in match.groups())
        return cls(major=major, minor=minor, patch=patch)

    def bump_patch(self) -> "Version":
        """Return the next patch version, keeping major and minor."""
        return Version(major=self.major, minor=self.minor, patch=self.patch + 1)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class ChangelogEntry:
    """A versioned release notes entry.

    Attributes:
        version: Version of the release
        date: Release date, rendered as ISO-8601
        body: Release notes text
    """

    version: Version
    date: date
    body: str

    @property
    def header(self) -> str:
        """Entry header line, e.g. ``## Version 1.2.3 - 2024-05-01``."""
        return f"## Version {self.version} - {self.date.isoformat()}"

    def render(self) -> str:
        """Render the entry as a changelog block."""
        return f"{self.header}\n\n{self.body}\n\n"
