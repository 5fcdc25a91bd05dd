"""Normalized representation of what changed since a reference point."""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

INITIAL_COMMIT_TEXT = "Initial commit"


class ChangeSetKind(str, Enum):
    """Kind of change set produced by a run."""

    INITIAL = "initial"
    DIFF = "diff"
    COMMITS_ONLY = "commits_only"
    ERROR = "error"


@dataclass(frozen=True)
class InitialChangeSet:
    """No usable history exists to compare against."""

    kind: ClassVar[ChangeSetKind] = ChangeSetKind.INITIAL

    @property
    def description(self) -> str:
        """Deterministic summary text for this change set."""
        return INITIAL_COMMIT_TEXT


@dataclass(frozen=True)
class DiffChangeSet:
    """A textual diff with its commit messages and changed files.

    Attributes:
        body: Full diff text between the reference point and HEAD
        commit_summaries: One ``- <short-hash>: <message>`` line per commit
        changed_files: One ``- <path> (<change type>)`` line per file
    """

    kind: ClassVar[ChangeSetKind] = ChangeSetKind.DIFF

    body: str
    commit_summaries: str = ""
    changed_files: str = ""

    def __post_init__(self) -> None:
        """Validate the diff body."""
        if not self.body.strip():
            raise ValueError("Diff change set requires a non-empty diff body")


@dataclass(frozen=True)
class CommitsOnlyChangeSet:
    """Commit messages used in place of an empty diff."""

    kind: ClassVar[ChangeSetKind] = ChangeSetKind.COMMITS_ONLY

    commit_summaries: str
    changed_files: str = ""

    def __post_init__(self) -> None:
        """Validate that there is something to summarize."""
        if not self.commit_summaries.strip() and not self.changed_files.strip():
            raise ValueError(
                "Commits-only change set requires commit messages or changed files"
            )


@dataclass(frozen=True)
class ErrorChangeSet:
    """Terminal state: history could not be read, or nothing changed."""

    kind: ClassVar[ChangeSetKind] = ChangeSetKind.ERROR

    reason: str

    def __post_init__(self) -> None:
        """Validate the reason."""
        if not self.reason.strip():
            raise ValueError("Error change set requires a reason")

    @property
    def description(self) -> str:
        """Deterministic summary text for this change set."""
        return self.reason


ChangeSet = InitialChangeSet | DiffChangeSet | CommitsOnlyChangeSet | ErrorChangeSet
