"""Tests for release_ticker.summarization.services.summarization_service."""

import subprocess
import sys
import textwrap
import time
from pathlib import Path

import pytest

from release_ticker.git.domain.change_sets import (
    CommitsOnlyChangeSet,
    DiffChangeSet,
    ErrorChangeSet,
    InitialChangeSet,
)
from release_ticker.summarization.domain.value_objects import SummaryPrompt
from release_ticker.summarization.prompts import SYSTEM_PROMPT
from release_ticker.summarization.services import summarization_service
from release_ticker.summarization.services.summarization_service import (
    NO_CHANGES_SUMMARY,
    SummarizationService,
    combine_summaries,
    strip_hedging,
)
from tests._fakes import FakeLLMAgent

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Splits into three chunks at max_chunk_size=4.
THREE_CHUNK_DIFF = "aaa\nbbb\nccc\n"


def _part(prompt: SummaryPrompt) -> int:
    """Return the 1-based chunk number named in a prompt."""
    for number in range(1, 10):
        if f"Part {number} of" in prompt.user:
            return number
    raise AssertionError(f"No chunk label in prompt: {prompt.user!r}")


class TestStripHedging:
    """Tests for strip_hedging."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("- Probably fixed the  parser crash", "- fixed the parser crash"),
            ("- This might improve startup", "- This improve startup"),
            ("- Likely added caching\n- Could have removed logs", "- added caching\n- removed logs"),
            ("- Updated README.md", "- Updated README.md"),
            ("  - Trailing spaces   \n", "- Trailing spaces"),
        ],
    )
    def test_strip(self, text: str, expected: str) -> None:
        """Hedging tokens are removed and whitespace is tidied."""
        assert strip_hedging(text) == expected

    def test_keeps_words_containing_hedges(self) -> None:
        """Only whole words are removed."""
        assert strip_hedging("- Unlikely branch removed") == "- Unlikely branch removed"


class TestCombineSummaries:
    """Tests for combine_summaries."""

    def test_dedup_preserves_first_occurrence_order(self) -> None:
        """Repeated summaries are dropped; order follows first occurrence."""
        assert combine_summaries(["A", "B", "A"]) == "A\nB"

    def test_drops_empty(self) -> None:
        """Empty summaries contribute nothing."""
        assert combine_summaries(["", "A", ""]) == "A"
        assert combine_summaries([]) == ""


class TestDeterministicChangeSets:
    """Initial and error change sets never reach the LLM."""

    def test_initial(self) -> None:
        """Initial change sets summarize to the literal 'Initial commit'."""
        agent = FakeLLMAgent(default="- should not be used")
        assert SummarizationService(agent).summarize(InitialChangeSet()) == "Initial commit"
        assert agent.prompts == []

    def test_error(self) -> None:
        """Error change sets summarize to their reason."""
        agent = FakeLLMAgent(default="- should not be used")
        change_set = ErrorChangeSet(reason="Error getting diff: bad revision")
        assert SummarizationService(agent).summarize(change_set) == (
            "Error getting diff: bad revision"
        )
        assert agent.prompts == []


class TestDiffSummaries:
    """Tests for summarizing diff change sets."""

    def test_single_chunk(self) -> None:
        """A small diff is summarized in one call."""
        agent = FakeLLMAgent(["- Added login endpoint."])
        change_set = DiffChangeSet(body="+def login():\n+    return True\n")

        assert SummarizationService(agent).summarize(change_set) == "- Added login endpoint."
        assert len(agent.prompts) == 1

    def test_prompt_contents(self) -> None:
        """The prompt carries the system prompt, context and chunk label."""
        agent = FakeLLMAgent(["- Added login endpoint."])
        change_set = DiffChangeSet(
            body="+def login():\n",
            commit_summaries="- abc1234: Add login",
            changed_files="- app.py (modified)",
        )
        SummarizationService(agent).summarize(change_set)

        prompt = agent.prompts[0]
        assert prompt.system == SYSTEM_PROMPT
        assert "Commit messages:\n- abc1234: Add login" in prompt.user
        assert "Changed files:\n- app.py (modified)" in prompt.user
        assert "Part 1 of 1" in prompt.user
        assert prompt.user.endswith("+def login():\n")

    def test_long_context_is_truncated(self) -> None:
        """Commit context is cut to the chunk size."""
        agent = FakeLLMAgent(["- Change."])
        change_set = DiffChangeSet(body="+x\n", commit_summaries="- " + "m" * 50)
        SummarizationService(agent, max_chunk_size=10).summarize(change_set)

        assert "- mmmmmmmm\n[truncated]" in agent.prompts[0].user

    def test_one_call_per_chunk_and_dedup(self) -> None:
        """Chunk summaries are joined in order with repeats removed."""
        agent = FakeLLMAgent(["A", "B", "A"])
        change_set = DiffChangeSet(body=THREE_CHUNK_DIFF)

        assert SummarizationService(agent, max_chunk_size=4).summarize(change_set) == "A\nB"
        assert [_part(prompt) for prompt in agent.prompts] == [1, 2, 3]

    def test_hedging_removed_from_output(self) -> None:
        """Generated text is cleaned before it is combined."""
        agent = FakeLLMAgent(["- Probably fixed the crash"])
        change_set = DiffChangeSet(body="-crash()\n")
        assert SummarizationService(agent).summarize(change_set) == "- fixed the crash"

    def test_failed_chunks_are_skipped(self) -> None:
        """A failing chunk does not stop the others."""
        agent = FakeLLMAgent([RuntimeError("HTTP 503"), "- B", None])
        change_set = DiffChangeSet(body=THREE_CHUNK_DIFF)
        assert SummarizationService(agent, max_chunk_size=4).summarize(change_set) == "- B"

    def test_all_chunks_failed(self) -> None:
        """Total failure degrades to a message naming the change size."""
        agent = FakeLLMAgent(default=RuntimeError("connection refused"))
        change_set = DiffChangeSet(body=THREE_CHUNK_DIFF)

        summary = SummarizationService(agent, max_chunk_size=4).summarize(change_set)
        assert summary == (
            "Changes were made but could not be summarized (12 characters in 3 chunk(s))."
        )

    def test_no_text_returned(self) -> None:
        """Empty responses everywhere degrade to the no-changes message."""
        agent = FakeLLMAgent([None, "   ", None])
        change_set = DiffChangeSet(body=THREE_CHUNK_DIFF)
        assert SummarizationService(agent, max_chunk_size=4).summarize(change_set) == (
            NO_CHANGES_SUMMARY
        )

    def test_hedging_only_response_counts_as_empty(self) -> None:
        """A response that is nothing but hedging contributes nothing."""
        agent = FakeLLMAgent(["probably"])
        change_set = DiffChangeSet(body="+x\n")
        assert SummarizationService(agent).summarize(change_set) == NO_CHANGES_SUMMARY


class TestCommitsOnlySummaries:
    """Tests for summarizing commits-only change sets."""

    def test_commit_prompt(self) -> None:
        """Commit messages and files are summarized in place of the diff."""
        agent = FakeLLMAgent(["- Fixed typo in docs."])
        change_set = CommitsOnlyChangeSet(
            commit_summaries="- abc1234: Fix typo",
            changed_files="- docs/index.md (modified)",
        )

        assert SummarizationService(agent).summarize(change_set) == "- Fixed typo in docs."
        prompt = agent.prompts[0].user
        assert "The diff for this release is empty" in prompt
        assert "Commit messages:\n- abc1234: Fix typo\n\nChanged files:\n- docs/index.md" in prompt


class TestConcurrency:
    """Tests for concurrent chunk summarization."""

    def test_results_keep_chunk_order(self) -> None:
        """Chunks that finish out of order are reassembled in order."""

        def responder(prompt: SummaryPrompt) -> str:
            part = _part(prompt)
            time.sleep(0.05 * (4 - part))
            return f"- change {part}"

        agent = FakeLLMAgent(responder=responder)
        service = SummarizationService(agent, max_chunk_size=4, max_concurrency=3)

        assert service.summarize(DiffChangeSet(body=THREE_CHUNK_DIFF)) == (
            "- change 1\n- change 2\n- change 3"
        )
        assert len(agent.prompts) == 3

    def test_dedup_after_reassembly(self) -> None:
        """Deduplication follows chunk order, not completion order."""

        def responder(prompt: SummaryPrompt) -> str:
            part = _part(prompt)
            time.sleep(0.05 * (4 - part))
            return "A" if part in (1, 3) else "B"

        agent = FakeLLMAgent(responder=responder)
        service = SummarizationService(agent, max_chunk_size=4, max_concurrency=3)
        assert service.summarize(DiffChangeSet(body=THREE_CHUNK_DIFF)) == "A\nB"

    def test_stalled_chunk_counts_as_failed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A chunk exceeding the bounded wait is treated as a failure."""
        monkeypatch.setattr(summarization_service, "STALL_GRACE_SECONDS", 0.0)

        def responder(prompt: SummaryPrompt) -> str:
            if _part(prompt) == 1:
                time.sleep(2.0)
                return "- too late"
            return "- B"

        agent = FakeLLMAgent(responder=responder)
        service = SummarizationService(
            agent, max_chunk_size=4, max_concurrency=2, request_timeout=0.1
        )
        started = time.monotonic()
        assert service.summarize(DiffChangeSet(body="aaa\nbbb\n")) == "- B"
        assert time.monotonic() - started < 1.0

    def test_stalled_chunk_does_not_block_sequential_run(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """With a single worker, chunks after a stalled one are still summarized."""
        monkeypatch.setattr(summarization_service, "STALL_GRACE_SECONDS", 0.0)

        def responder(prompt: SummaryPrompt) -> str:
            if _part(prompt) == 1:
                time.sleep(2.0)
                return "- too late"
            return f"- change {_part(prompt)}"

        agent = FakeLLMAgent(responder=responder)
        service = SummarizationService(
            agent, max_chunk_size=4, max_concurrency=1, request_timeout=0.2
        )
        assert service.summarize(DiffChangeSet(body=THREE_CHUNK_DIFF)) == (
            "- change 2\n- change 3"
        )

    def test_stalled_call_does_not_delay_process_exit(self) -> None:
        """The interpreter exits once summarizing returns, even with a call still stuck."""
        script = textwrap.dedent(
            """
            import time

            from release_ticker.git.domain.change_sets import DiffChangeSet
            from release_ticker.logging import configure_logging
            from release_ticker.summarization.repositories.interfaces import LLMAgentRepository
            from release_ticker.summarization.services import summarization_service

            configure_logging(quiet=True)
            summarization_service.STALL_GRACE_SECONDS = 0.0


            class StuckAgent(LLMAgentRepository):
                def generate(self, prompt):
                    if "Part 1 of" in prompt.user:
                        time.sleep(30)
                    return "- ok"


            service = summarization_service.SummarizationService(
                StuckAgent(), max_chunk_size=4, max_concurrency=2, request_timeout=0.1
            )
            print(service.summarize(DiffChangeSet(body="aaa\\nbbb\\n")))
            """
        )
        started = time.monotonic()
        result = subprocess.run(
            [sys.executable, "-c", script],
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            timeout=25,
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "- ok"
        assert time.monotonic() - started < 15

    def test_rejects_non_positive_concurrency(self) -> None:
        """At least one worker is required."""
        with pytest.raises(ValueError):
            SummarizationService(FakeLLMAgent(), max_concurrency=0)
