"""Repository interfaces for Git operations."""

from abc import ABC, abstractmethod

from release_ticker.git.domain.entities import Commit
from release_ticker.git.domain.value_objects import FileChange


class GitRepository(ABC):
    """Interface for read-only Git history queries."""

    @abstractmethod
    def ensure_full_history(self) -> bool:
        """
        Convert a shallow clone into a full-history clone.

        Returns:
            True if missing history was fetched, False if the clone was complete

        Raises:
            RuntimeError: If the history could not be fetched
        """
        ...

    @abstractmethod
    def latest_tag(self) -> str | None:
        """
        Get the most recently created tag.

        Returns:
            Tag name, or None if the repository has no tags
        """
        ...

    @abstractmethod
    def commit_count(self) -> int:
        """
        Count the commits reachable from HEAD.

        Returns:
            Number of commits
        """
        ...

    @abstractmethod
    def diff(self, ref_a: str, ref_b: str) -> str:
        """
        Get the diff content between two revisions.

        Args:
            ref_a: Older revision
            ref_b: Newer revision

        Returns:
            Unified diff text, possibly empty
        """
        ...

    @abstractmethod
    def diff_name_status(self, ref_a: str, ref_b: str) -> tuple[FileChange, ...]:
        """
        List the files changed between two revisions.

        Args:
            ref_a: Older revision
            ref_b: Newer revision

        Returns:
            Tuple of file changes
        """
        ...

    @abstractmethod
    def log(self, from_ref: str, to_ref: str) -> tuple[Commit, ...]:
        """
        List commits reachable from to_ref but not from from_ref.

        Args:
            from_ref: Older revision (excluded)
            to_ref: Newer revision (included)

        Returns:
            Tuple of commits ordered from newest to oldest
        """
        ...
