"""Service for announcing new changelog entries."""

from release_ticker.changelog.domain.value_objects import ChangelogEntry
from release_ticker.notifications.domain.value_objects import (
    ReleaseAnnouncement,
    SlackChannel,
)
from release_ticker.notifications.repositories.implementations import (
    SlackNotificationRepositoryImpl,
)


class NotificationService:
    """Service for orchestrating release announcements."""

    def __init__(self, slack_repository: SlackNotificationRepositoryImpl) -> None:
        """Initialize the notification service.

        Args:
            slack_repository: Repository for posting to Slack
        """
        self._slack_repository = slack_repository

    def announce_release(self, entry: ChangelogEntry, channel_name: str) -> None:
        """Post a changelog entry to a Slack channel.

        Args:
            entry: The entry that was added to the changelog
            channel_name: The name of the Slack channel (without # prefix)

        Raises:
            ValueError: If the channel name or entry body is invalid
            RuntimeError: If there's an error sending the message to Slack
        """
        channel = SlackChannel(name=channel_name)
        announcement = ReleaseAnnouncement.from_entry(entry)

        if not self._slack_repository.post_announcement(channel, announcement):
            raise RuntimeError("Failed to send message to Slack (API returned failure)")
