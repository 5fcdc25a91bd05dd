"""Summarization service for turning change sets into release notes."""

import queue
import re
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError

from release_ticker.git.domain.change_sets import (
    ChangeSet,
    CommitsOnlyChangeSet,
    DiffChangeSet,
    ErrorChangeSet,
    InitialChangeSet,
)
from release_ticker.logging import get_logger
from release_ticker.summarization.domain.value_objects import (
    Chunk,
    ChunkSummary,
    SummaryPrompt,
)
from release_ticker.summarization.prompts import (
    COMMITS_PROMPT_TEMPLATE,
    DIFF_PROMPT_TEMPLATE,
    SYSTEM_PROMPT,
)
from release_ticker.summarization.repositories.interfaces import LLMAgentRepository
from release_ticker.summarization.services.chunker import (
    DEFAULT_MAX_CHUNK_SIZE,
    chunk_text,
)

logger = get_logger(__name__)

NO_CHANGES_SUMMARY = "No significant changes detected."
UNSUMMARIZED_TEMPLATE = (
    "Changes were made but could not be summarized "
    "({chars} characters in {chunks} chunk(s))."
)
TRUNCATION_MARKER = "\n[truncated]"
# Extra wait on top of the request timeout before a chunk counts as stalled
STALL_GRACE_SECONDS = 5.0

_HEDGING = re.compile(r"\b(?:probably|likely|might|could have)\b[ \t]*", re.IGNORECASE)
_REPEATED_SPACES = re.compile(r"(?<=\S)[ \t]{2,}")

_Task = tuple[int, SummaryPrompt, Future[ChunkSummary]]


def strip_hedging(text: str) -> str:
    """
    Remove hedging words from generated text.

    Args:
        text: Generated summary

    Returns:
        The text without hedging tokens, with repeated spaces collapsed and
        trailing whitespace removed from every line
    """
    cleaned = _HEDGING.sub("", text)
    cleaned = _REPEATED_SPACES.sub(" ", cleaned)
    return "\n".join(line.rstrip() for line in cleaned.split("\n")).strip()


def combine_summaries(summaries: list[str]) -> str:
    """
    Join chunk summaries, dropping empty ones and exact repeats.

    Args:
        summaries: Summaries in chunk order

    Returns:
        Newline-joined summaries, first occurrences kept in order
    """
    unique = dict.fromkeys(summary for summary in summaries if summary)
    return "\n".join(unique)


class SummarizationService:
    """Service for summarizing change sets through an LLM agent."""

    def __init__(
        self,
        llm_agent: LLMAgentRepository,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        max_concurrency: int = 1,
        request_timeout: float = 60.0,
    ) -> None:
        """
        Initialize SummarizationService.

        Args:
            llm_agent: Repository for LLM-based text generation
            max_chunk_size: Maximum characters of change text per LLM call
            max_concurrency: Number of chunks summarized in parallel
            request_timeout: Seconds a single LLM call is expected to take at most
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be positive")

        self._llm_agent = llm_agent
        self._max_chunk_size = max_chunk_size
        self._max_concurrency = max_concurrency
        self._chunk_timeout = request_timeout + STALL_GRACE_SECONDS

    def summarize(self, change_set: ChangeSet) -> str:
        """
        Generate release notes for a change set.

        Initial and error change sets return their own text without calling
        the LLM. Per-chunk failures are logged and skipped.

        Args:
            change_set: Change set extracted from the repository

        Returns:
            Release notes text, or a deterministic fallback message
        """
        match change_set:
            case InitialChangeSet() | ErrorChangeSet():
                logger.info("summarization_skipped", kind=change_set.kind.value)
                return change_set.description
            case DiffChangeSet():
                body = change_set.body
                prompts = self._diff_prompts(change_set)
            case CommitsOnlyChangeSet():
                body = self._commits_body(change_set)
                prompts = self._commit_prompts(body)
            case _:
                raise TypeError(f"Unsupported change set: {change_set!r}")

        logger.info(
            "summarization_started",
            kind=change_set.kind.value,
            chars=len(body),
            chunks=len(prompts),
        )
        results = self._summarize_chunks(prompts)

        summary = combine_summaries([result.text for result in results if result.text])
        if summary:
            return summary

        if all(result.failed for result in results):
            logger.warning("summarization_failed", chunks=len(results))
            return UNSUMMARIZED_TEMPLATE.format(chars=len(body), chunks=len(results))

        return NO_CHANGES_SUMMARY

    def _diff_prompts(self, change_set: DiffChangeSet) -> list[SummaryPrompt]:
        """Build one prompt per diff chunk, with commits and files as context."""
        context = ""
        if change_set.commit_summaries:
            context += (
                f"Commit messages:\n{self._truncate(change_set.commit_summaries)}\n\n"
            )
        if change_set.changed_files:
            context += f"Changed files:\n{self._truncate(change_set.changed_files)}\n\n"

        return [
            SummaryPrompt(
                system=SYSTEM_PROMPT,
                user=DIFF_PROMPT_TEMPLATE.format(
                    context=context, label=chunk.label, chunk=chunk.text
                ),
            )
            for chunk in self._chunks(change_set.body)
        ]

    def _commit_prompts(self, body: str) -> list[SummaryPrompt]:
        """Build one prompt per chunk of commit information."""
        return [
            SummaryPrompt(
                system=SYSTEM_PROMPT,
                user=COMMITS_PROMPT_TEMPLATE.format(label=chunk.label, chunk=chunk.text),
            )
            for chunk in self._chunks(body)
        ]

    @staticmethod
    def _commits_body(change_set: CommitsOnlyChangeSet) -> str:
        sections = []
        if change_set.commit_summaries:
            sections.append(f"Commit messages:\n{change_set.commit_summaries}")
        if change_set.changed_files:
            sections.append(f"Changed files:\n{change_set.changed_files}")
        return "\n\n".join(sections)

    def _chunks(self, text: str) -> list[Chunk]:
        pieces = chunk_text(text, self._max_chunk_size)
        return [
            Chunk(index=index, total=len(pieces), text=piece)
            for index, piece in enumerate(pieces)
        ]

    def _truncate(self, text: str) -> str:
        if len(text) <= self._max_chunk_size:
            return text
        return text[: self._max_chunk_size] + TRUNCATION_MARKER

    def _summarize_chunks(self, prompts: list[SummaryPrompt]) -> list[ChunkSummary]:
        """
        Summarize every prompt, returning results in prompt order.

        Chunks are taken from a queue by up to ``max_concurrency`` daemon
        worker threads. A chunk whose result is not ready within the chunk
        timeout counts as failed and its worker is abandoned; a replacement
        worker keeps the remaining chunks moving. Abandoned workers never keep
        the process alive at exit.
        """
        pending: queue.SimpleQueue[_Task] = queue.SimpleQueue()
        futures: list[Future[ChunkSummary]] = []
        for index, prompt in enumerate(prompts):
            future: Future[ChunkSummary] = Future()
            pending.put((index, prompt, future))
            futures.append(future)

        for _ in range(min(self._max_concurrency, len(prompts))):
            self._start_worker(pending)

        results: list[ChunkSummary] = []
        for index, future in enumerate(futures):
            try:
                results.append(future.result(timeout=self._chunk_timeout))
            except FutureTimeoutError:
                logger.warning(
                    "chunk_summary_stalled",
                    chunk=index + 1,
                    timeout=self._chunk_timeout,
                )
                results.append(ChunkSummary(index=index, failed=True))
                if not future.cancel():
                    self._start_worker(pending)
        return results

    def _start_worker(self, pending: queue.SimpleQueue[_Task]) -> None:
        worker = threading.Thread(
            target=self._drain, args=(pending,), name="summarize", daemon=True
        )
        worker.start()

    def _drain(self, pending: queue.SimpleQueue[_Task]) -> None:
        while True:
            try:
                index, prompt, future = pending.get_nowait()
            except queue.Empty:
                return
            # Skip chunks already given up on
            if not future.set_running_or_notify_cancel():
                continue
            future.set_result(self._summarize_chunk(index, prompt))

    def _summarize_chunk(self, index: int, prompt: SummaryPrompt) -> ChunkSummary:
        """Summarize one chunk; failures are logged and reported, never raised."""
        try:
            text = self._llm_agent.generate(prompt)
        except Exception as e:
            # Continue with other chunks even if one fails
            logger.warning("chunk_summary_failed", chunk=index + 1, error=str(e))
            return ChunkSummary(index=index, failed=True)

        if text is None:
            logger.warning("chunk_summary_empty", chunk=index + 1)
            return ChunkSummary(index=index)

        cleaned = strip_hedging(text)
        logger.debug("chunk_summarized", chunk=index + 1, chars=len(cleaned))
        return ChunkSummary(index=index, text=cleaned or None)
