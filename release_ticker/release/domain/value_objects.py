"""Value objects for the release pipeline."""

from dataclasses import dataclass
from pathlib import Path

from release_ticker.changelog.domain.value_objects import ChangelogEntry
from release_ticker.git.domain.change_sets import ChangeSetKind


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of one release-notes run.

    Attributes:
        entry: The changelog entry that was (or would be) written
        change_set_kind: Which kind of change set the summary came from
        changelog_path: Location of the changelog document
        written: False for dry runs
    """

    entry: ChangelogEntry
    change_set_kind: ChangeSetKind
    changelog_path: Path
    written: bool
