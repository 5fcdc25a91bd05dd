"""Concrete implementation of Git repository operations."""

import subprocess
from datetime import datetime
from pathlib import Path

from release_ticker.git.domain.entities import Commit
from release_ticker.git.domain.value_objects import FileChange, FileChangeType
from release_ticker.git.repositories.interfaces import GitRepository

DEFAULT_GIT_TIMEOUT = 120.0


class GitRepositoryImpl(GitRepository):
    """Concrete implementation of Git repository operations using git commands."""

    def __init__(self, repo_path: Path, timeout: float = DEFAULT_GIT_TIMEOUT) -> None:
        """
        Initialize GitRepositoryImpl.

        Args:
            repo_path: Path to the git working tree
            timeout: Maximum number of seconds a single git command may run
        """
        self._repo_path = repo_path
        self._timeout = timeout

    def ensure_full_history(self) -> bool:
        """
        Convert a shallow clone into a full-history clone.

        Returns:
            True if missing history was fetched, False if the clone was complete

        Raises:
            RuntimeError: If the shallow state cannot be read or the fetch fails
        """
        is_shallow = self._run("rev-parse", "--is-shallow-repository").strip()
        if is_shallow != "true":
            return False

        self._run("fetch", "--unshallow", "--tags")
        return True

    def latest_tag(self) -> str | None:
        """
        Get the most recently created tag.

        Returns:
            Tag name, or None if the repository has no tags
        """
        output = self._run(
            "for-each-ref",
            "--sort=-creatordate",
            "--count=1",
            "--format=%(refname:short)",
            "refs/tags",
        )
        tag = output.strip()
        return tag or None

    def commit_count(self) -> int:
        """
        Count the commits reachable from HEAD.

        Returns:
            Number of commits, 0 for a repository without any commit
        """
        head = self._run_unchecked("rev-parse", "--verify", "--quiet", "HEAD")
        if head.returncode != 0:
            return 0

        output = self._run("rev-list", "--count", "HEAD")
        try:
            return int(output.strip())
        except ValueError as e:
            raise RuntimeError(f"Unexpected commit count output: {output!r}") from e

    def diff(self, ref_a: str, ref_b: str) -> str:
        """
        Get the diff content between two revisions.

        Args:
            ref_a: Older revision
            ref_b: Newer revision

        Returns:
            Unified diff text, possibly empty
        """
        return self._run("diff", ref_a, ref_b)

    def diff_name_status(self, ref_a: str, ref_b: str) -> tuple[FileChange, ...]:
        """
        List the files changed between two revisions.

        Args:
            ref_a: Older revision
            ref_b: Newer revision

        Returns:
            Tuple of file changes
        """
        output = self._run("diff", "--name-status", ref_a, ref_b)

        file_changes: list[FileChange] = []
        for line in output.strip().split("\n"):
            if not line:
                continue
            parts = line.split("\t")
            if len(parts) == 2:
                status, file_path = parts
                file_changes.append(
                    FileChange(
                        file_path=file_path,
                        change_type=self._parse_status_to_change_type(status),
                    )
                )
            elif len(parts) >= 3:  # Renamed or copied files
                status, old_path, new_path = parts[0], parts[1], parts[2]
                file_changes.append(
                    FileChange(
                        file_path=new_path,
                        change_type=self._parse_status_to_change_type(status),
                        old_path=old_path,
                    )
                )

        return tuple(file_changes)

    def log(self, from_ref: str, to_ref: str) -> tuple[Commit, ...]:
        """
        List commits reachable from to_ref but not from from_ref.

        Args:
            from_ref: Older revision (excluded)
            to_ref: Newer revision (included)

        Returns:
            Tuple of commits ordered from newest to oldest
        """
        output = self._run("log", "--format=%H|%an|%aI|%s", f"{from_ref}..{to_ref}")

        commits: list[Commit] = []
        for line in output.strip().split("\n"):
            if not line:
                continue
            parts = line.split("|", 3)
            if len(parts) != 4:
                continue
            commit_hash, author, date_str, message = parts
            commits.append(
                Commit(
                    hash=commit_hash,
                    author=author,
                    date=datetime.fromisoformat(date_str),
                    message=message,
                )
            )

        return tuple(commits)

    def _run(self, *args: str) -> str:
        """Run a git command and return its standard output.

        Raises:
            RuntimeError: If git cannot be started, fails or times out
        """
        command = " ".join(args)
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self._repo_path,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=True,
                timeout=self._timeout,
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.strip() if e.stderr else str(e)
            raise RuntimeError(f"git {command} failed: {error_msg}") from e
        except subprocess.TimeoutExpired as e:
            raise RuntimeError(
                f"git {command} timed out after {self._timeout:g} seconds"
            ) from e
        except FileNotFoundError as e:
            raise RuntimeError(f"Cannot run git in {self._repo_path}: {e}") from e
        except UnicodeDecodeError as e:
            raise RuntimeError(f"git {command} produced undecodable output: {e}") from e

    def _run_unchecked(self, *args: str) -> subprocess.CompletedProcess[str]:
        """Run a git command without raising on a non-zero exit status."""
        try:
            return subprocess.run(
                ["git", *args],
                cwd=self._repo_path,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise RuntimeError(
                f"git {' '.join(args)} timed out after {self._timeout:g} seconds"
            ) from e
        except FileNotFoundError as e:
            raise RuntimeError(f"Cannot run git in {self._repo_path}: {e}") from e

    @staticmethod
    def _parse_status_to_change_type(status: str) -> FileChangeType:
        """Parse git status code to FileChangeType."""
        status_code = status[0] if status else ""
        match status_code:
            case "A":
                return FileChangeType.ADDED
            case "M":
                return FileChangeType.MODIFIED
            case "D":
                return FileChangeType.DELETED
            case "R":
                return FileChangeType.RENAMED
            case "C":
                return FileChangeType.COPIED
            case "T":
                return FileChangeType.TYPE_CHANGED
            case _:
                return FileChangeType.MODIFIED  # Default fallback
