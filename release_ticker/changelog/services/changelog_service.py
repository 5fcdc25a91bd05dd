"""Service for building changelog entries and prepending them to the document."""

from datetime import date

from release_ticker.changelog.domain.value_objects import ChangelogEntry, Version
from release_ticker.changelog.repositories.interfaces import ChangelogRepository
from release_ticker.changelog.services.version_service import VersionService
from release_ticker.logging import get_logger

logger = get_logger(__name__)


class ChangelogService:
    """Service for versioned, prepend-only changelog updates."""

    def __init__(
        self,
        changelog_repository: ChangelogRepository,
        version_service: VersionService | None = None,
    ) -> None:
        """
        Initialize ChangelogService.

        Args:
            changelog_repository: Repository holding the changelog document
            version_service: Service computing the next version. Defaults to VersionService()
        """
        self._changelog_repository = changelog_repository
        self._version_service = version_service or VersionService()

    @staticmethod
    def build_entry(version: Version, summary: str, on: date | None = None) -> ChangelogEntry:
        """
        Create a changelog entry.

        Args:
            version: Version of the release
            summary: Release notes text
            on: Release date. Defaults to today

        Returns:
            The entry, with surrounding whitespace removed from the summary
        """
        return ChangelogEntry(version=version, date=on or date.today(), body=summary.strip())

    @staticmethod
    def merge(existing: str, entry: ChangelogEntry) -> str:
        """
        Place an entry in front of the existing changelog.

        Args:
            existing: Current document text, kept byte-for-byte as the suffix
            entry: Entry to add

        Returns:
            The new document text
        """
        return entry.render() + existing

    def preview_entry(self, summary: str, on: date | None = None) -> ChangelogEntry:
        """
        Compute the entry the next update would write, without writing it.

        Args:
            summary: Release notes text
            on: Release date. Defaults to today

        Returns:
            The entry

        Raises:
            RuntimeError: If the changelog cannot be read
        """
        existing = self._changelog_repository.read()
        version = self._version_service.next_version(existing)
        return self.build_entry(version, summary, on)

    def prepend_entry(self, summary: str, on: date | None = None) -> ChangelogEntry:
        """
        Add a new versioned entry at the top of the changelog.

        Reading, versioning and writing happen under the repository lock so
        concurrent runs cannot interleave.

        Args:
            summary: Release notes text
            on: Release date. Defaults to today

        Returns:
            The entry that was written

        Raises:
            RuntimeError: If the changelog cannot be locked, read or written
        """
        with self._changelog_repository.lock():
            existing = self._changelog_repository.read()
            version = self._version_service.next_version(existing)
            entry = self.build_entry(version, summary, on)
            self._changelog_repository.write(self.merge(existing, entry))

        logger.info("changelog_entry_added", version=str(entry.version))
        return entry
