"""Value objects for Git domain."""

from dataclasses import dataclass
from enum import Enum


class FileChangeType(str, Enum):
    """Type of file change between two revisions."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"
    TYPE_CHANGED = "type changed"


class ReferenceKind(str, Enum):
    """How a reference point was obtained."""

    TAG = "tag"
    OFFSET = "offset"


@dataclass(frozen=True)
class ReferencePoint:
    """A prior position in history to diff the current HEAD against."""

    ref: str
    kind: ReferenceKind

    def __post_init__(self) -> None:
        """Validate the reference."""
        if not self.ref or not self.ref.strip():
            raise ValueError("Reference cannot be empty")


@dataclass(frozen=True)
class FileChange:
    """Information about a file change between two revisions."""

    file_path: str
    change_type: FileChangeType
    old_path: str | None = None  # For renamed/copied files

    def describe(self) -> str:
        """Render the change as a changelog context line."""
        line = f"- {self.file_path} ({self.change_type.value})"
        if self.old_path:
            line += f" (from {self.old_path})"
        return line
