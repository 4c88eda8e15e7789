"""Gather the commentaries of one theological tradition for a passage."""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from .config import Settings, get_settings
from .fetcher import CommentaryFetcher, RetrievalContext
from .messages import message, normalize_language
from .models import (
    Commentary,
    CommentarySource,
    FailedCommentary,
    RetrievalOutcome,
    VerseLimitExceeded,
    VerseReference,
)
from .parser import parse_verse_reference
from .sources import get_sources

logger = logging.getLogger(__name__)


def count_verses(ref: VerseReference) -> int:
    """Number of verses a reference spans (1 for a single verse)."""
    if ref.end_verse is not None:
        return ref.end_verse - ref.start_verse + 1
    return 1


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CommentaryRetriever:
    """Parses a passage and fetches each of a denomination's commentaries in turn."""

    def __init__(
        self,
        fetcher: Optional[CommentaryFetcher] = None,
        settings: Optional[Settings] = None,
        context: Optional[RetrievalContext] = None,
    ):
        self.settings = settings or get_settings()
        self.fetcher = fetcher or CommentaryFetcher(context, settings=self.settings)

    def parse(self, passage: str, language: str = "en") -> VerseReference:
        return parse_verse_reference(passage, normalize_language(language))

    def resolve_sources(
        self,
        denomination: str,
        max_sources: int,
        selected_sources: Optional[Iterable[str]] = None,
    ) -> list[CommentarySource]:
        """
        Pick the sources to query, in the denomination's order.

        Args:
            denomination: Denomination id, e.g. "calvinism"
            max_sources: Upper bound on the number of sources returned
            selected_sources: Explicit source codes; unknown codes are ignored

        Raises:
            UnknownDenominationError: no sources configured for ``denomination``
        """
        sources = get_sources(denomination)
        if selected_sources:
            wanted = set(selected_sources)
            chosen = [s for s in sources if s.code in wanted]
            if chosen:
                return chosen[:max_sources]
            logger.warning(
                "None of the selected sources %s belong to %s, using defaults",
                sorted(wanted), denomination,
            )
        return sources[:max_sources]

    def retrieve(
        self,
        denomination: str,
        passage: str,
        max_sources: Optional[int] = None,
        language: str = "en",
        selected_sources: Optional[Iterable[str]] = None,
        max_verses: Optional[int] = None,
    ) -> Union[RetrievalOutcome, VerseLimitExceeded]:
        """
        Retrieve commentaries on ``passage`` from ``denomination``'s sources.

        Args:
            denomination: Denomination id, e.g. "calvinism"
            passage: Passage text, e.g. "John 3:16" or "约3:16"
            max_sources: Number of sources to query (defaults to settings)
            language: Language for parse and limit messages
            selected_sources: Explicit source codes to prefer
            max_verses: Largest verse range accepted (defaults to settings)

        Returns:
            RetrievalOutcome, or VerseLimitExceeded when the range is too large

        Raises:
            ParseError: the passage is malformed or out of bounds
            UnknownDenominationError: the denomination is not configured
        """
        language = normalize_language(language)
        if max_sources is None:
            max_sources = self.settings.max_commentaries
        if max_verses is None:
            max_verses = self.settings.max_verses

        ref = self.parse(passage, language)

        verse_count = count_verses(ref)
        if verse_count > max_verses:
            logger.warning("Passage %s spans %d verses (limit %d)", passage, verse_count, max_verses)
            return VerseLimitExceeded(
                error=message("too_many_verses", language, verse_count=verse_count, max_verses=max_verses),
                verse_count=verse_count,
                max_verses=max_verses,
            )

        sources = self.resolve_sources(denomination, max_sources, selected_sources)
        logger.info("Retrieving %d commentaries for %s on %s", len(sources), denomination, passage)

        outcome = RetrievalOutcome(denomination=denomination, passage=passage, parsed_verse=ref)
        for source in sources:
            try:
                result = self.fetcher.fetch(source.code, ref.book, ref.chapter, ref.start_verse, ref.end_verse)
            except Exception as e:
                logger.exception("Failed to retrieve %s", source.name)
                outcome.failed_commentaries.append(
                    FailedCommentary(source.name, source.author, str(e), code=source.code)
                )
                continue

            if result.ok:
                outcome.commentaries.append(Commentary(
                    name=source.name,
                    author=source.author,
                    code=source.code,
                    content=result.content,
                    source=f"{result.source} - {source.name}",
                    url=result.url,
                ))
                logger.info("Successfully retrieved %s", source.name)
            else:
                outcome.failed_commentaries.append(FailedCommentary(
                    source.name, source.author, result.content,
                    code=source.code, reason=result.error.value,
                ))
                logger.warning("Filtered out %s: %s", source.name, result.error.value)

        outcome.retrieved_at = _now()
        return outcome


def retrieve_with_deadline(
    retriever: CommentaryRetriever,
    denomination: str,
    passage: str,
    timeout: Optional[float] = None,
    **kwargs,
) -> Union[RetrievalOutcome, VerseLimitExceeded]:
    """
    Run ``retriever.retrieve`` with a wall-clock ceiling.

    Parse and denomination errors are raised before any fetching starts. When
    the ceiling passes, an outcome with ``timed_out`` set and no commentaries
    is returned; the fetches in flight are left to finish in the background.
    """
    timeout = timeout or retriever.settings.retrieval_timeout
    ref = retriever.parse(passage, kwargs.get("language", "en"))
    get_sources(denomination)

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="commentary")
    future = executor.submit(retriever.retrieve, denomination, passage, **kwargs)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        logger.warning("Commentary retrieval timed out after %.1fs, using fallback", timeout)
        return RetrievalOutcome(
            denomination=denomination,
            passage=passage,
            parsed_verse=ref,
            retrieved_at=_now(),
            timed_out=True,
        )
    finally:
        executor.shutdown(wait=False)


def format_commentaries_for_prompt(commentaries: list[Commentary]) -> str:
    """Numbered citation list: "[n] **Name by Author:**", the text, then "---"."""
    return "\n".join(
        f"\n[{i}] **{c.name} by {c.author}:**\n{c.content}\n---"
        for i, c in enumerate(commentaries, 1)
    )
