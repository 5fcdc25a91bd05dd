#!/usr/bin/env python3
"""
Script to generate release notes for a git repository and prepend them to the changelog:
- Repository path (optional, defaults to the current directory)
- Changelog file (optional, defaults to RELEASE_FILE or RELEASE.md)
- LLM provider and model (optional, default to LLM_PROVIDER / RELEASE_MODEL)
- --dry-run: print the entry without writing it
- --slack-channel: announce the new entry on Slack
"""

import argparse
import subprocess
import sys
from pathlib import Path

from release_ticker.changelog.repositories.implementations import (
    FileChangelogRepository,
)
from release_ticker.changelog.services.changelog_service import ChangelogService
from release_ticker.config import Settings
from release_ticker.git.repositories.implementations import GitRepositoryImpl
from release_ticker.git.services.git_service import GitService
from release_ticker.logging import configure_logging
from release_ticker.notifications.domain.value_objects import SlackChannel
from release_ticker.notifications.repositories.implementations import (
    SlackNotificationRepositoryImpl,
)
from release_ticker.notifications.services.notification_service import (
    NotificationService,
)
from release_ticker.release.services.release_notes_service import ReleaseNotesService
from release_ticker.summarization.repositories.factory import create_llm_agent
from release_ticker.summarization.services.summarization_service import (
    SummarizationService,
)


def is_git_repository(repo_path: Path) -> bool:
    """Check if the given path is inside a git working tree."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--is-inside-work-tree"],
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=False,
            timeout=30,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0 and result.stdout.strip() == "true"


def validate_repository(repo_path: Path) -> tuple[bool, str]:
    """
    Validate the repository path and return (is_valid, message).

    Args:
        repo_path: Path to the git repository

    Returns:
        Tuple of (is_valid, message)
    """
    if not repo_path.exists():
        return False, f"Repository path does not exist: {repo_path}"

    if not repo_path.is_dir():
        return False, f"Repository path is not a directory: {repo_path}"

    if not is_git_repository(repo_path):
        return False, f"Path is not a git repository: {repo_path}"

    return True, f"Repository: {repo_path.resolve()}"


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        description=(
            "Summarize the changes since the last release with an LLM and "
            "prepend a versioned entry to the changelog"
        )
    )
    parser.add_argument(
        "repo_path",
        type=Path,
        nargs="?",
        default=Path("."),
        help="Path to the git repository directory (default: current directory)",
    )
    parser.add_argument(
        "--changelog",
        "-o",
        type=Path,
        default=None,
        help="Changelog file, relative to the repository (default: RELEASE_FILE or RELEASE.md)",
    )
    parser.add_argument(
        "--provider",
        type=str,
        default=None,
        help="LLM provider: huggingface, anthropic or openai (default: LLM_PROVIDER)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model identifier (default: RELEASE_MODEL or the provider default)",
    )
    parser.add_argument(
        "--max-chunk-size",
        type=int,
        default=None,
        help="Maximum characters of change text per LLM call (default: 2000)",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Number of chunks summarized in parallel (default: 1)",
    )
    parser.add_argument(
        "--no-fetch",
        action="store_true",
        help="Do not try to fetch full history for shallow clones",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the new entry without writing the changelog",
    )
    parser.add_argument(
        "--slack-channel",
        type=str,
        default=None,
        help="Announce the new entry in this Slack channel (requires SLACK_TOKEN)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Only log warnings and errors")
    parser.add_argument(
        "--json-log",
        action="store_true",
        help="Emit logs as JSON lines on stderr",
    )
    return parser


def build_service(args: argparse.Namespace, settings: Settings) -> ReleaseNotesService:
    """
    Wire the release pipeline from settings.

    Raises:
        ValueError: If the LLM agent or the Slack announcement is misconfigured
    """
    repo_path: Path = args.repo_path
    changelog_path = settings.changelog_file
    if not changelog_path.is_absolute():
        changelog_path = repo_path / changelog_path

    git_service = GitService(
        GitRepositoryImpl(repo_path, timeout=settings.git_timeout),
        fetch_history=not args.no_fetch,
    )
    summarization_service = SummarizationService(
        create_llm_agent(settings),
        max_chunk_size=settings.max_chunk_size,
        max_concurrency=settings.max_concurrency,
        request_timeout=settings.request_timeout,
    )
    changelog_service = ChangelogService(
        FileChangelogRepository(changelog_path, lock_timeout=settings.lock_timeout)
    )

    notification_service = None
    if settings.slack_channel:
        SlackChannel(name=settings.slack_channel)
        if not settings.slack_token:
            raise ValueError(
                "SLACK_TOKEN environment variable is required when a Slack channel is set. "
                "Get your token from https://api.slack.com/apps"
            )
        notification_service = NotificationService(
            SlackNotificationRepositoryImpl(token=settings.slack_token)
        )

    return ReleaseNotesService(
        git_service=git_service,
        summarization_service=summarization_service,
        changelog_service=changelog_service,
        changelog_path=changelog_path,
        notification_service=notification_service,
        slack_channel=settings.slack_channel,
    )


def main(argv: list[str] | None = None) -> None:
    """Main function to parse arguments, generate release notes and update the changelog."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    is_valid, message = validate_repository(args.repo_path)
    if not is_valid:
        print(f"✗ Validation failed: {message}", file=sys.stderr)
        sys.exit(1)

    print(f"✓ {message}")

    try:
        settings = Settings.from_env(
            provider=args.provider,
            model=args.model,
            max_chunk_size=args.max_chunk_size,
            max_concurrency=args.max_concurrency,
            changelog_file=args.changelog,
            slack_channel=args.slack_channel,
        )
        service = build_service(args, settings)
    except ValueError as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        print(
            "  Hint: Set the provider API key (e.g. HUGGINGFACE_API_KEY) in .env file or environment",
            file=sys.stderr,
        )
        sys.exit(1)

    print(f"  Provider: {settings.provider} ({settings.model})")
    print("\n📝 Generating release notes...")

    try:
        result = service.run(dry_run=args.dry_run)
    except RuntimeError as e:
        print(f"✗ Failed to update changelog: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"✗ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)

    print("=" * 80)
    print(result.entry.render().rstrip())
    print("=" * 80)

    if result.written:
        print(f"\n✓ Release notes for version {result.entry.version} written!")
        print(f"  Changelog: {result.changelog_path.absolute()}")
    else:
        print(f"\n✓ Dry run: {result.changelog_path} was not modified")

    sys.exit(0)


if __name__ == "__main__":
    main()
