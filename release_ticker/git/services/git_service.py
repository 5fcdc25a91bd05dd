"""Git service for resolving reference points and extracting change sets."""

from collections.abc import Callable

from release_ticker.git.domain.change_sets import (
    ChangeSet,
    CommitsOnlyChangeSet,
    DiffChangeSet,
    ErrorChangeSet,
    InitialChangeSet,
)
from release_ticker.git.domain.value_objects import ReferenceKind, ReferencePoint
from release_ticker.git.repositories.interfaces import GitRepository
from release_ticker.logging import get_logger

logger = get_logger(__name__)

HEAD = "HEAD"
PREVIOUS_COMMIT = "HEAD~1"
NO_CHANGES_REASON = "No relevant changes detected."
ERROR_REASON_PREFIX = "Error getting diff"


class GitService:
    """Service for turning repository history into a change set."""

    def __init__(self, git_repository: GitRepository, fetch_history: bool = True) -> None:
        """
        Initialize GitService.

        Args:
            git_repository: Repository implementation for Git operations
            fetch_history: Try to unshallow the clone before resolving references
        """
        self._git_repository = git_repository
        self._fetch_history = fetch_history

    def resolve_reference(self) -> ReferencePoint | None:
        """
        Determine the historical point to diff HEAD against.

        Strategies are tried in order and the first hit wins: the latest tag,
        then the previous commit when at least two commits exist.

        Returns:
            The reference point, or None when there is no usable history

        Raises:
            RuntimeError: If the repository cannot be queried
        """
        if self._fetch_history:
            self._ensure_full_history()

        strategies: tuple[tuple[str, Callable[[], ReferencePoint | None]], ...] = (
            ("latest_tag", self._latest_tag_reference),
            ("previous_commit", self._previous_commit_reference),
        )
        for name, strategy in strategies:
            reference = strategy()
            if reference is not None:
                logger.info(
                    "reference_resolved",
                    strategy=name,
                    ref=reference.ref,
                    kind=reference.kind.value,
                )
                return reference

        logger.info("reference_not_found", detail="not enough history for a diff")
        return None

    def extract_changes(self, reference: ReferencePoint | None) -> ChangeSet:
        """
        Build the change set between a reference point and HEAD.

        Args:
            reference: Reference point returned by resolve_reference

        Returns:
            The change set; history errors are reported as ErrorChangeSet
        """
        if reference is None:
            return InitialChangeSet()

        try:
            logger.info("diff_requested", ref=reference.ref, head=HEAD)
            diff = self._git_repository.diff(reference.ref, HEAD)
            file_changes = self._git_repository.diff_name_status(reference.ref, HEAD)
            commits = self._git_repository.log(reference.ref, HEAD)
        except (RuntimeError, OSError) as e:
            logger.error("diff_failed", ref=reference.ref, error=str(e))
            return ErrorChangeSet(reason=f"{ERROR_REASON_PREFIX}: {e}")

        commit_summaries = "\n".join(commit.describe() for commit in commits)
        changed_files = "\n".join(change.describe() for change in file_changes)

        if diff.strip():
            logger.info(
                "diff_extracted",
                chars=len(diff),
                commits=len(commits),
                files=len(file_changes),
            )
            return DiffChangeSet(
                body=diff,
                commit_summaries=commit_summaries,
                changed_files=changed_files,
            )

        if commit_summaries or changed_files:
            logger.info("using_commit_messages", commits=len(commits))
            return CommitsOnlyChangeSet(
                commit_summaries=commit_summaries,
                changed_files=changed_files,
            )

        logger.info("no_changes_detected", ref=reference.ref)
        return ErrorChangeSet(reason=NO_CHANGES_REASON)

    def collect_changes(self) -> ChangeSet:
        """
        Resolve the reference point and extract the change set in one step.

        Returns:
            The change set; resolver failures are reported as ErrorChangeSet
        """
        try:
            reference = self.resolve_reference()
        except (RuntimeError, OSError) as e:
            logger.error("reference_resolution_failed", error=str(e))
            return ErrorChangeSet(reason=f"{ERROR_REASON_PREFIX}: {e}")

        return self.extract_changes(reference)

    def _ensure_full_history(self) -> None:
        """Unshallow the clone; failures are logged and otherwise ignored."""
        try:
            if self._git_repository.ensure_full_history():
                logger.info("history_unshallowed")
            else:
                logger.debug("history_complete")
        except (RuntimeError, OSError) as e:
            logger.warning("history_fetch_failed", error=str(e))

    def _latest_tag_reference(self) -> ReferencePoint | None:
        tag = self._git_repository.latest_tag()
        if tag is None:
            return None
        return ReferencePoint(ref=tag, kind=ReferenceKind.TAG)

    def _previous_commit_reference(self) -> ReferencePoint | None:
        if self._git_repository.commit_count() < 2:
            return None
        return ReferencePoint(ref=PREVIOUS_COMMIT, kind=ReferenceKind.OFFSET)
