"""Concrete implementations of notification repositories."""

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from release_ticker.notifications.domain.value_objects import (
    ReleaseAnnouncement,
    SlackChannel,
)
from release_ticker.summarization.services.chunker import chunk_text

# Slack has a 3000 char limit per block; leave some margin
MAX_BLOCK_SIZE = 2900
# Slack rejects messages with more blocks than this
MAX_BLOCKS = 50
TRUNCATED_MARKER = "\n_Truncated, see the changelog for the full release notes._"

_SLACK_ERROR_HINTS: dict[str, str] = {
    "channel_not_found": (
        "Channel '{channel}' not found. Make sure the bot is invited to the channel."
    ),
    "not_in_channel": (
        "Bot is not a member of channel '{channel}'. "
        "Please invite the bot to the channel first."
    ),
    "invalid_auth": "Invalid Slack token. Please check your token configuration.",
}


class SlackNotificationRepositoryImpl:
    """Release announcements posted through the Slack Web API."""

    def __init__(self, token: str, client: WebClient | None = None) -> None:
        """Initialize the Slack client with token.

        Args:
            token: The Slack Bot User OAuth Token
            client: Optional preconfigured Slack client

        Raises:
            ValueError: If token is empty or None
        """
        if not token:
            raise ValueError(
                "SLACK_TOKEN is required to announce releases. "
                "Get your token from https://api.slack.com/apps"
            )

        self._client = client or WebClient(token=token)

    def post_announcement(
        self, channel: SlackChannel, announcement: ReleaseAnnouncement
    ) -> bool:
        """Post a release announcement to a Slack channel.

        Args:
            channel: The Slack channel to post to
            announcement: The announcement to post

        Returns:
            True if Slack accepted the message, False otherwise

        Raises:
            RuntimeError: If there's an error communicating with Slack
        """
        try:
            response = self._client.chat_postMessage(
                channel=channel.name,
                blocks=self.build_blocks(announcement),
                text=announcement.title,  # Fallback for notifications
            )
        except SlackApiError as e:
            error_code = e.response.get("error", "unknown error")
            hint = _SLACK_ERROR_HINTS.get(error_code, "Slack API error: {error}")
            raise RuntimeError(hint.format(channel=channel.name, error=error_code)) from e
        except Exception as e:
            raise RuntimeError(f"Failed to send Slack message: {e}") from e

        return bool(response.get("ok", False))

    @staticmethod
    def build_blocks(announcement: ReleaseAnnouncement) -> list[dict[str, object]]:
        """Build Block Kit blocks: a header, then one section per text chunk.

        Text that needs more sections than Slack accepts is cut after the
        last section that fits, which then ends with a truncation marker.
        """
        blocks: list[dict[str, object]] = [
            {
                "type": "header",
                "text": {"type": "plain_text", "text": announcement.title, "emoji": True},
            }
        ]
        chunks = chunk_text(announcement.text, MAX_BLOCK_SIZE)
        if len(chunks) > MAX_BLOCKS - 1:
            chunks = chunks[: MAX_BLOCKS - 1]
            chunks[-1] += TRUNCATED_MARKER
        for chunk in chunks:
            blocks.append({"type": "section", "text": {"type": "mrkdwn", "text": chunk}})
        return blocks
