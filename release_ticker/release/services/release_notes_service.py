"""Release pipeline: history, summary, changelog, announcement."""

from datetime import date
from pathlib import Path

from release_ticker.changelog.domain.value_objects import ChangelogEntry
from release_ticker.changelog.services.changelog_service import ChangelogService
from release_ticker.git.services.git_service import GitService
from release_ticker.logging import get_logger
from release_ticker.notifications.services.notification_service import (
    NotificationService,
)
from release_ticker.release.domain.value_objects import ReleaseResult
from release_ticker.summarization.services.summarization_service import (
    SummarizationService,
)

logger = get_logger(__name__)


class ReleaseNotesService:
    """Service for generating and recording release notes for one release."""

    def __init__(
        self,
        git_service: GitService,
        summarization_service: SummarizationService,
        changelog_service: ChangelogService,
        changelog_path: Path,
        notification_service: NotificationService | None = None,
        slack_channel: str | None = None,
    ) -> None:
        """
        Initialize ReleaseNotesService.

        Args:
            git_service: Service producing the change set
            summarization_service: Service turning the change set into text
            changelog_service: Service updating the changelog
            changelog_path: Location of the changelog, for reporting
            notification_service: Optional service announcing the release
            slack_channel: Channel for the announcement, required with notification_service
        """
        self._git_service = git_service
        self._summarization_service = summarization_service
        self._changelog_service = changelog_service
        self._changelog_path = changelog_path
        self._notification_service = notification_service
        self._slack_channel = slack_channel

    def run(self, dry_run: bool = False, on: date | None = None) -> ReleaseResult:
        """
        Generate release notes and prepend them to the changelog.

        Args:
            dry_run: Compute the entry without writing or announcing it
            on: Release date. Defaults to today

        Returns:
            The outcome of the run

        Raises:
            RuntimeError: If the changelog cannot be read, locked or written
        """
        change_set = self._git_service.collect_changes()
        summary = self._summarization_service.summarize(change_set)

        if dry_run:
            entry = self._changelog_service.preview_entry(summary, on)
            logger.info("dry_run", version=str(entry.version))
            return ReleaseResult(
                entry=entry,
                change_set_kind=change_set.kind,
                changelog_path=self._changelog_path,
                written=False,
            )

        entry = self._changelog_service.prepend_entry(summary, on)
        self._announce(entry)

        return ReleaseResult(
            entry=entry,
            change_set_kind=change_set.kind,
            changelog_path=self._changelog_path,
            written=True,
        )

    def _announce(self, entry: ChangelogEntry) -> None:
        """Announce the entry; failures are logged since the changelog is written."""
        if self._notification_service is None or not self._slack_channel:
            return

        try:
            self._notification_service.announce_release(entry, self._slack_channel)
        except (ValueError, RuntimeError) as e:
            logger.error("announcement_failed", channel=self._slack_channel, error=str(e))
            return

        logger.info("release_announced", channel=self._slack_channel)
