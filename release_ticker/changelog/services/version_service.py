"""Service for computing the next release version from the changelog."""

import re

from release_ticker.changelog.domain.value_objects import Version
from release_ticker.logging import get_logger

logger = get_logger(__name__)

BASELINE_VERSION = Version(0, 0, 0)
_VERSION_HEADER = re.compile(r"^## Version[ \t]+(\S+)", re.MULTILINE)


class VersionService:
    """Service for reading and bumping changelog versions."""

    @staticmethod
    def current_version(document: str) -> Version | None:
        """
        Find the version of the newest changelog entry.

        Only the first ``## Version`` header is considered.

        Args:
            document: Existing changelog text

        Returns:
            The parsed version, or None if there is no valid header
        """
        match = _VERSION_HEADER.search(document)
        if match is None:
            return None

        try:
            return Version.parse(match.group(1))
        except ValueError:
            logger.warning("malformed_version_header", header=match.group(0))
            return None

    def next_version(self, document: str) -> Version:
        """
        Compute the version of the next changelog entry.

        Args:
            document: Existing changelog text

        Returns:
            The current version with its patch bumped, or 0.0.1 when the
            document has no valid version header
        """
        current = self.current_version(document) or BASELINE_VERSION
        return current.bump_patch()
