"""Value objects for the notifications domain."""

import re
from dataclasses import dataclass

from release_ticker.changelog.domain.value_objects import ChangelogEntry

_CHANNEL_NAME = re.compile(r"[a-z0-9_-]+")


@dataclass(frozen=True)
class SlackChannel:
    """Slack channel to announce releases in.

    Attributes:
        name: The channel name without the # prefix
    """

    name: str

    def __post_init__(self) -> None:
        """Validate the channel name against Slack naming rules."""
        if not self.name:
            raise ValueError("Channel name cannot be empty")
        if self.name.startswith("#"):
            raise ValueError(
                f"Channel name should not include the # prefix, use '{self.name[1:]}'"
            )
        if not _CHANNEL_NAME.fullmatch(self.name):
            raise ValueError(
                f"Invalid channel name '{self.name}'. Channel names can only contain "
                "lowercase letters, numbers, hyphens, and underscores"
            )


@dataclass(frozen=True)
class ReleaseAnnouncement:
    """Message announcing a new changelog entry.

    Attributes:
        title: Header shown above the release notes
        text: Release notes in markdown format
    """

    title: str
    text: str

    def __post_init__(self) -> None:
        """Validate the announcement."""
        if not self.text.strip():
            raise ValueError("Announcement text cannot be empty")

    @classmethod
    def from_entry(cls, entry: ChangelogEntry) -> "ReleaseAnnouncement":
        """Build the announcement for a changelog entry."""
        return cls(
            title=f"🚀 Release {entry.version} ({entry.date.isoformat()})",
            text=entry.body,
        )
