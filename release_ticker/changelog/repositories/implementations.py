"""File-based changelog persistence with atomic writes and an advisory lock."""

import json
import os
import socket
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from pathlib import Path

from release_ticker.changelog.repositories.interfaces import ChangelogRepository
from release_ticker.logging import get_logger

logger = get_logger(__name__)

LOCK_SUFFIX = ".lock"
DEFAULT_LOCK_TIMEOUT = 30.0
# A lock older than this is considered abandoned.
DEFAULT_STALE_TIMEOUT = 600.0
LOCK_POLL_INTERVAL = 0.1
CORRUPT_LOCK_GRACE = 2.0


@dataclass(frozen=True)
class LockInfo:
    """Metadata stored in the lock file.

    Attributes:
        pid: Process ID that holds the lock.
        hostname: Machine hostname.
        timestamp: Unix timestamp when the lock was acquired.
    """

    pid: int
    hostname: str
    timestamp: float


def _read_lock_bytes(lock_path: Path) -> bytes | None:
    """Return the raw lock file content, or None if it cannot be read."""
    try:
        return lock_path.read_bytes()
    except OSError:
        return None


def _parse_lock(raw: bytes | None) -> LockInfo | None:
    """Parse lock file content, returning None if absent/corrupt."""
    if raw is None:
        return None
    try:
        data = json.loads(raw.decode("utf-8"))
        return LockInfo(
            pid=int(data["pid"]),
            hostname=str(data["hostname"]),
            timestamp=float(data["timestamp"]),
        )
    except (json.JSONDecodeError, KeyError, ValueError, TypeError):
        return None


def _is_process_alive(pid: int) -> bool:
    """Return True if a process with the given PID exists on this host."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Process exists but we lack permission to signal it.
        return True
    return True


def _is_stale(info: LockInfo, stale_timeout: float) -> bool:
    """Return True if the lock is too old or its process is gone."""
    if time.time() - info.timestamp > stale_timeout:
        return True
    return info.hostname == socket.gethostname() and not _is_process_alive(info.pid)


class FileChangelogRepository(ChangelogRepository):
    """Changelog stored as a UTF-8 markdown file."""

    def __init__(
        self,
        path: Path,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        stale_timeout: float = DEFAULT_STALE_TIMEOUT,
    ) -> None:
        """
        Initialize FileChangelogRepository.

        Args:
            path: Path to the changelog file
            lock_timeout: Seconds to wait for another writer to release the lock
            stale_timeout: Seconds after which an existing lock is removed
        """
        self._path = path
        self._lock_path = path.with_name(path.name + LOCK_SUFFIX)
        self._lock_timeout = lock_timeout
        self._stale_timeout = stale_timeout

    @property
    def path(self) -> Path:
        """Location of the changelog file."""
        return self._path

    def read(self) -> str:
        """
        Read the current changelog document.

        Returns:
            The document text, empty if the file does not exist yet

        Raises:
            RuntimeError: If the file exists but cannot be read or decoded
        """
        try:
            # Bytes are decoded without newline translation
            return self._path.read_bytes().decode("utf-8")
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeDecodeError) as e:
            raise RuntimeError(f"Failed to read changelog {self._path}: {e}") from e

    def write(self, content: str) -> None:
        """
        Atomically replace the changelog file.

        The content goes to a temporary file in the same directory which is
        flushed to disk and renamed over the changelog.

        Args:
            content: New document text

        Raises:
            RuntimeError: If the file cannot be written
        """
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=directory, prefix=f".{self._path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise RuntimeError(f"Failed to write changelog {self._path}: {e}") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            if self._path.exists():
                os.chmod(tmp_path, self._path.stat().st_mode & 0o777)
            else:
                os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self._path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise RuntimeError(f"Failed to write changelog {self._path}: {e}") from e

        logger.info("changelog_written", path=str(self._path), chars=len(content))

    @contextmanager
    def lock(self) -> Iterator[None]:
        """
        Hold the advisory ``<changelog>.lock`` file for the duration of the block.

        Raises:
            RuntimeError: If another process keeps the lock past the timeout
        """
        info = self._acquire_lock()
        try:
            yield
        finally:
            self._release_lock(info)

    def _acquire_lock(self) -> LockInfo:
        deadline = time.monotonic() + self._lock_timeout
        info = LockInfo(pid=os.getpid(), hostname=socket.gethostname(), timestamp=time.time())
        content = json.dumps(asdict(info)) + "\n"

        while True:
            try:
                fd = os.open(
                    str(self._lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644
                )
            except FileExistsError:
                raw = _read_lock_bytes(self._lock_path)
                existing = _parse_lock(raw)
                if self._is_abandoned(existing) and self._remove_stale_lock(raw):
                    logger.warning("stale_lock_removed", path=str(self._lock_path))
                    continue
                if time.monotonic() >= deadline:
                    holder = (
                        f"PID {existing.pid} on {existing.hostname}"
                        if existing
                        else "another process"
                    )
                    raise RuntimeError(
                        f"Changelog lock {self._lock_path} held by {holder}. "
                        "If that process is no longer running, delete the lock file manually."
                    ) from None
                time.sleep(LOCK_POLL_INTERVAL)
                continue
            except OSError as e:
                raise RuntimeError(
                    f"Failed to create changelog lock {self._lock_path}: {e}"
                ) from e

            try:
                os.write(fd, content.encode("utf-8"))
            except BaseException:
                os.close(fd)
                self._lock_path.unlink(missing_ok=True)
                raise
            os.close(fd)
            logger.debug("lock_acquired", path=str(self._lock_path), pid=info.pid)
            return info

    def _is_abandoned(self, existing: LockInfo | None) -> bool:
        """Return True if the current lock file can be removed."""
        if existing is not None:
            return _is_stale(existing, self._stale_timeout)

        # Unreadable lock: either corrupt or still being written by its owner.
        try:
            age = time.time() - self._lock_path.stat().st_mtime
        except FileNotFoundError:
            return False
        return age > CORRUPT_LOCK_GRACE

    def _remove_stale_lock(self, expected: bytes | None) -> bool:
        """
        Remove the lock file if it still holds ``expected``.

        The lock is first renamed aside so that only one waiter can take it.
        If the file taken is not the one judged stale, another process has
        replaced the lock in the meantime and it is put back.

        Returns:
            True if the stale lock was removed
        """
        if expected is None:
            return False
        aside = self._lock_path.with_name(f"{self._lock_path.name}.{os.getpid()}.stale")
        try:
            os.rename(self._lock_path, aside)
        except OSError:
            return False
        try:
            if _read_lock_bytes(aside) == expected:
                return True
            try:
                os.link(aside, self._lock_path)
            except OSError as e:
                logger.warning(
                    "lock_restore_failed", path=str(self._lock_path), error=str(e)
                )
            return False
        finally:
            aside.unlink(missing_ok=True)

    def _release_lock(self, info: LockInfo) -> None:
        existing = _parse_lock(_read_lock_bytes(self._lock_path))
        if existing is not None and existing.pid != info.pid:
            logger.warning(
                "lock_owned_by_other",
                path=str(self._lock_path),
                owner_pid=existing.pid,
            )
            return
        self._lock_path.unlink(missing_ok=True)
        logger.debug("lock_released", path=str(self._lock_path))
