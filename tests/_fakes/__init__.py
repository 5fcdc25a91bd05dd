"""Shared test fakes for release-ticker.

Provides in-memory implementations of the repository interfaces so that
individual test modules don't need to duplicate boilerplate classes.

Usage::

    from tests._fakes import FakeGitRepository, FakeLLMAgent

    git = FakeGitRepository(tag="v1.0.0", diff_text="+new line\n")
    agent = FakeLLMAgent(responses=["- Added login endpoint."])
"""

from tests._fakes._changelog import InMemoryChangelogRepository as InMemoryChangelogRepository
from tests._fakes._git import FakeGitRepository as FakeGitRepository
from tests._fakes._llm import FakeLLMAgent as FakeLLMAgent

__all__ = [
    "FakeGitRepository",
    "FakeLLMAgent",
    "InMemoryChangelogRepository",
]
