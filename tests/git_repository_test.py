"""Tests for GitRepositoryImpl against a real temporary repository."""

import shutil
import subprocess
from pathlib import Path

import pytest

from release_ticker.git.domain.change_sets import DiffChangeSet
from release_ticker.git.domain.value_objects import FileChangeType
from release_ticker.git.repositories.implementations import GitRepositoryImpl
from release_ticker.git.services.git_service import GitService

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(repo: Path, *args: str) -> None:
    subprocess.run(
        [
            "git",
            "-c",
            "user.name=Release Bot",
            "-c",
            "user.email=release-bot@example.com",
            "-c",
            "commit.gpgsign=false",
            "-c",
            "tag.gpgsign=false",
            *args,
        ],
        cwd=repo,
        check=True,
        capture_output=True,
    )


def _commit(repo: Path, message: str, **files: str) -> None:
    for name, content in files.items():
        (repo / name).write_text(content, encoding="utf-8")
    _git(repo, "add", "--all")
    _git(repo, "commit", "--quiet", "-m", message)


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty git repository isolated from the user's git configuration."""
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("HOME", str(tmp_path))
    path = tmp_path / "repo"
    path.mkdir()
    _git(path, "init", "--quiet")
    return path


class TestGitRepositoryImpl:
    """Tests for GitRepositoryImpl."""

    def test_empty_repository(self, repo: Path) -> None:
        """A repository without commits has no tags and no commits."""
        repository = GitRepositoryImpl(repo)
        assert repository.commit_count() == 0
        assert repository.latest_tag() is None

    def test_commit_count_and_tag(self, repo: Path) -> None:
        """Commits are counted and the latest tag is found."""
        _commit(repo, "Initial commit", **{"app.py": "print('hi')\n"})
        _commit(repo, "Add README", **{"README.md": "# App\n"})
        _git(repo, "tag", "v1.0.0")

        repository = GitRepositoryImpl(repo)
        assert repository.commit_count() == 2
        assert repository.latest_tag() == "v1.0.0"

    def test_diff_status_and_log_since_tag(self, repo: Path) -> None:
        """Diff, changed files and commits are read relative to a tag."""
        _commit(repo, "Initial commit", **{"app.py": "print('hi')\n", "old.txt": "bye\n"})
        _git(repo, "tag", "v1.0.0")
        (repo / "old.txt").unlink()
        _commit(
            repo,
            "Add login endpoint | with pipes",
            **{"app.py": "def login():\n    return True\n", "auth.py": "TOKEN = 1\n"},
        )

        repository = GitRepositoryImpl(repo)

        diff = repository.diff("v1.0.0", "HEAD")
        assert "+def login():" in diff

        changes = {
            change.file_path: change.change_type
            for change in repository.diff_name_status("v1.0.0", "HEAD")
        }
        assert changes == {
            "app.py": FileChangeType.MODIFIED,
            "auth.py": FileChangeType.ADDED,
            "old.txt": FileChangeType.DELETED,
        }

        commits = repository.log("v1.0.0", "HEAD")
        assert len(commits) == 1
        assert commits[0].message == "Add login endpoint | with pipes"
        assert commits[0].author == "Release Bot"
        assert commits[0].date is not None
        assert len(commits[0].short_hash) == 7

    def test_empty_diff_between_same_revisions(self, repo: Path) -> None:
        """Identical revisions produce no diff and no commits."""
        _commit(repo, "Initial commit", **{"app.py": "x\n"})
        repository = GitRepositoryImpl(repo)
        assert repository.diff("HEAD", "HEAD") == ""
        assert repository.log("HEAD", "HEAD") == ()
        assert repository.diff_name_status("HEAD", "HEAD") == ()

    def test_complete_clone_is_not_fetched(self, repo: Path) -> None:
        """A non-shallow repository needs no fetch."""
        _commit(repo, "Initial commit", **{"app.py": "x\n"})
        assert GitRepositoryImpl(repo).ensure_full_history() is False

    def test_unknown_revision_raises(self, repo: Path) -> None:
        """Git failures surface as RuntimeError with git's message."""
        _commit(repo, "Initial commit", **{"app.py": "x\n"})
        with pytest.raises(RuntimeError, match="git diff"):
            GitRepositoryImpl(repo).diff("v9.9.9", "HEAD")

    def test_not_a_repository(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Running outside a repository raises RuntimeError."""
        monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(RuntimeError):
            GitRepositoryImpl(plain).latest_tag()

    def test_missing_directory(self, tmp_path: Path) -> None:
        """A missing working directory is reported as RuntimeError."""
        with pytest.raises(RuntimeError, match="Cannot run git"):
            GitRepositoryImpl(tmp_path / "missing").latest_tag()

    def test_non_utf8_content_is_decoded_with_replacement(self, repo: Path) -> None:
        """Latin-1 file content and commit messages do not break history reads."""
        _commit(repo, "Initial commit", **{"menu.txt": "cafe\n"})
        _git(repo, "tag", "v1")
        (repo / "menu.txt").write_bytes(b"caf\xe9\n")
        message = repo.parent / "message.txt"
        message.write_bytes(b"Rename caf\xe9 entry\n")
        _git(repo, "add", "--all")
        _git(repo, "commit", "--quiet", "-F", str(message))

        repository = GitRepositoryImpl(repo)
        assert "caf\ufffd" in repository.diff("v1", "HEAD")
        assert repository.log("v1", "HEAD")[0].message == "Rename caf\ufffd entry"

        changes = GitService(repository, fetch_history=False).collect_changes()
        assert isinstance(changes, DiffChangeSet)
        assert "caf\ufffd" in changes.body
