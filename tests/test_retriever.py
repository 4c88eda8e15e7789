"""Tests for the denomination retriever."""

import threading
from unittest.mock import Mock

import pytest

from bible_commentary.errors import FetchErrorKind, ReferenceBoundsError, UnknownDenominationError
from bible_commentary.fetcher import ERROR_PREFIX, CommentaryFetcher
from bible_commentary.models import Commentary, FetchResult, RetrievalOutcome, VerseLimitExceeded, VerseReference
from bible_commentary.retriever import (
    CommentaryRetriever,
    count_verses,
    format_commentaries_for_prompt,
    retrieve_with_deadline,
)
from bible_commentary.sources import COMMENTARY_SOURCES
from bible_commentary.verse_filter import NO_COMMENTARY_PREFIX


def stub_fetcher(results: dict):
    """A fetcher returning canned FetchResults keyed by source code."""
    fetcher = Mock(spec=CommentaryFetcher)

    def fetch(code, book, chapter, start_verse=None, end_verse=None):
        outcome = results.get(code, "ok")
        if isinstance(outcome, Exception):
            raise outcome
        if outcome == "ok":
            return FetchResult(f"Verse {start_verse}\nCommentary text from {code}.", url=f"https://example/{code}")
        if outcome == "none":
            return FetchResult(f"{NO_COMMENTARY_PREFIX} {start_verse} in this source.",
                               FetchErrorKind.NO_CONTENT_FOR_RANGE)
        return FetchResult(f"{ERROR_PREFIX} blocked", FetchErrorKind.BLOCKED)

    fetcher.fetch.side_effect = fetch
    return fetcher


class TestCountVerses:
    def test_single(self):
        assert count_verses(VerseReference("JHN", "John", 3, 16)) == 1

    def test_range(self):
        assert count_verses(VerseReference("MAT", "Matthew", 5, 1, 12)) == 12


class TestResolveSources:
    """Test choosing which sources to query."""

    def test_default_order_capped(self, settings):
        retriever = CommentaryRetriever(stub_fetcher({}), settings)
        sources = retriever.resolve_sources("calvinism", 2)
        assert [s.code for s in sources] == ["cal", "mhc"]

    def test_explicit_selection_in_denomination_order(self, settings):
        retriever = CommentaryRetriever(stub_fetcher({}), settings)
        sources = retriever.resolve_sources("calvinism", 3, ["bnb", "mhc", "zzz"])
        assert [s.code for s in sources] == ["mhc", "bnb"]

    def test_explicit_selection_capped(self, settings):
        retriever = CommentaryRetriever(stub_fetcher({}), settings)
        sources = retriever.resolve_sources("calvinism", 2, ["cal", "mhc", "geb", "spe"])
        assert [s.code for s in sources] == ["cal", "mhc"]

    def test_foreign_selection_falls_back_to_defaults(self, settings):
        retriever = CommentaryRetriever(stub_fetcher({}), settings)
        sources = retriever.resolve_sources("catholicism", 3, ["cal"])
        assert [s.code for s in sources] == ["hcc", "clc"]

    def test_unknown_denomination(self, settings):
        retriever = CommentaryRetriever(stub_fetcher({}), settings)
        with pytest.raises(UnknownDenominationError):
            retriever.resolve_sources("gnosticism", 3)


class TestRetrieve:
    """Test the retrieval flow."""

    def test_outcome_fields(self, settings):
        retriever = CommentaryRetriever(stub_fetcher({}), settings)
        outcome = retriever.retrieve("arminianism", "Romans 8:28", max_sources=2)

        assert isinstance(outcome, RetrievalOutcome)
        assert outcome.denomination == "arminianism"
        assert outcome.passage == "Romans 8:28"
        assert outcome.parsed_verse.book == "ROM"
        assert outcome.retrieved_at
        assert [c.code for c in outcome.commentaries] == ["wen", "acc"]
        assert outcome.commentaries[0].source == "StudyLight.org - Wesley's Explanatory Notes"
        assert outcome.commentaries[0].url == "https://example/wen"

    def test_fetch_arguments(self, settings):
        fetcher = stub_fetcher({})
        CommentaryRetriever(fetcher, settings).retrieve("calvinism", "John 3:16-18", max_sources=1)
        fetcher.fetch.assert_called_once_with("cal", "JHN", 3, 16, 18)

    def test_default_max_sources_from_settings(self, settings):
        fetcher = stub_fetcher({})
        CommentaryRetriever(fetcher, settings).retrieve("calvinism", "John 3:16")
        assert fetcher.fetch.call_count == settings.max_commentaries

    def test_zero_max_sources_fetches_nothing(self, settings):
        fetcher = stub_fetcher({})
        outcome = CommentaryRetriever(fetcher, settings).retrieve("calvinism", "John 3:16", max_sources=0)

        assert isinstance(outcome, RetrievalOutcome)
        assert outcome.commentaries == []
        assert outcome.failed_commentaries == []
        fetcher.fetch.assert_not_called()

    @pytest.mark.parametrize("results", [
        {},
        {"cal": "error"},
        {"mhc": "none", "geb": "error"},
        {"cal": "error", "mhc": "none", "geb": "error", "spe": "none", "bnb": "error"},
        {"cal": RuntimeError("parser exploded"), "geb": "none"},
    ])
    def test_partition_invariant(self, settings, results):
        retriever = CommentaryRetriever(stub_fetcher(results), settings)
        outcome = retriever.retrieve("calvinism", "John 3:16", max_sources=5)

        resolved = COMMENTARY_SOURCES["calvinism"][:5]
        assert len(outcome.commentaries) + len(outcome.failed_commentaries) == len(resolved)
        ok_codes = {c.code for c in outcome.commentaries}
        failed_codes = {f.code for f in outcome.failed_commentaries}
        assert not ok_codes & failed_codes
        for commentary in outcome.commentaries:
            assert not commentary.content.startswith(ERROR_PREFIX)
            assert not commentary.content.startswith(NO_COMMENTARY_PREFIX)

    def test_failure_details(self, settings):
        retriever = CommentaryRetriever(stub_fetcher({"cal": "error", "mhc": "none"}), settings)
        outcome = retriever.retrieve("calvinism", "John 3:16", max_sources=2)

        blocked, empty = outcome.failed_commentaries
        assert blocked.reason == "blocked"
        assert blocked.error.startswith(ERROR_PREFIX)
        assert empty.reason == "no_content_for_range"
        assert not blocked.success

    def test_exception_becomes_failure(self, settings):
        retriever = CommentaryRetriever(stub_fetcher({"cal": RuntimeError("parser exploded")}), settings)
        outcome = retriever.retrieve("calvinism", "John 3:16", max_sources=2)

        assert [f.code for f in outcome.failed_commentaries] == ["cal"]
        assert outcome.failed_commentaries[0].error == "parser exploded"
        assert [c.code for c in outcome.commentaries] == ["mhc"]

    def test_parse_errors_propagate(self, settings):
        fetcher = stub_fetcher({})
        with pytest.raises(ReferenceBoundsError):
            CommentaryRetriever(fetcher, settings).retrieve("calvinism", "John 3:40")
        fetcher.fetch.assert_not_called()

    def test_unknown_denomination(self, settings):
        with pytest.raises(UnknownDenominationError) as exc:
            CommentaryRetriever(stub_fetcher({}), settings).retrieve("gnosticism", "John 3:16")
        assert "gnosticism" in str(exc.value)

    def test_chinese_passage(self, settings):
        outcome = CommentaryRetriever(stub_fetcher({}), settings).retrieve(
            "catholicism", "约3:16", language="zh-CN"
        )
        assert outcome.parsed_verse == VerseReference("JHN", "John", 3, 16)


class TestVerseLimit:
    """Test the verse-count ceiling."""

    def test_too_many_verses(self, settings):
        fetcher = stub_fetcher({})
        result = CommentaryRetriever(fetcher, settings).retrieve("calvinism", "John 3:1-36", max_verses=30)

        assert isinstance(result, VerseLimitExceeded)
        assert result.verse_count == 36
        assert result.max_verses == 30
        assert "36" in result.error
        fetcher.fetch.assert_not_called()

    def test_limit_from_settings(self, settings):
        settings.max_verses = 5
        result = CommentaryRetriever(stub_fetcher({}), settings).retrieve("calvinism", "Matthew 5:1-12")
        assert isinstance(result, VerseLimitExceeded)

    def test_zero_limit_rejects_any_passage(self, settings):
        fetcher = stub_fetcher({})
        result = CommentaryRetriever(fetcher, settings).retrieve("calvinism", "John 3:16", max_verses=0)

        assert isinstance(result, VerseLimitExceeded)
        assert result.max_verses == 0
        fetcher.fetch.assert_not_called()

    def test_exactly_at_limit(self, settings):
        result = CommentaryRetriever(stub_fetcher({}), settings).retrieve(
            "calvinism", "Matthew 5:1-12", max_verses=12
        )
        assert isinstance(result, RetrievalOutcome)

    def test_chinese_message(self, settings):
        result = CommentaryRetriever(stub_fetcher({}), settings).retrieve(
            "calvinism", "约3:1-36", language="zh", max_verses=30
        )
        assert "36" in result.error
        assert "节" in result.error

    def test_to_dict(self, settings):
        result = CommentaryRetriever(stub_fetcher({}), settings).retrieve(
            "calvinism", "John 3:1-36", max_verses=30
        )
        assert result.to_dict() == {"error": result.error, "verse_count": 36, "max_verses": 30}


class TestEndToEnd:
    """Retrieval through the real fetcher against a stubbed HTTP session."""

    def test_calvinism_john_3_16(self, context, settings, session, response_factory, calvin_html, henry_html):
        pages = {
            "https://www.studylight.org/commentaries/eng/cal/john-3.html": calvin_html,
            "https://www.studylight.org/commentaries/eng/mhc/john-3.html": henry_html,
        }
        session.get.side_effect = lambda url, **kwargs: response_factory(200, pages[url])

        retriever = CommentaryRetriever(CommentaryFetcher(context, settings), settings)
        outcome = retriever.retrieve("calvinism", "John 3:16", max_sources=2, language="en")

        assert len(outcome.commentaries) == 2
        assert outcome.failed_commentaries == []
        for commentary in outcome.commentaries:
            assert commentary.content
            assert not commentary.content.startswith(ERROR_PREFIX)
            assert not commentary.content.startswith(NO_COMMENTARY_PREFIX)
        assert outcome.commentaries[0].content.startswith("Verse 16")
        assert outcome.commentaries[1].content.startswith("Verses 14-18")

        ref = outcome.parsed_verse
        assert (ref.chapter, ref.start_verse, ref.end_verse) == (3, 16, None)

    def test_to_json(self, context, settings, session, response_factory, calvin_html):
        session.get.return_value = response_factory(200, calvin_html)
        retriever = CommentaryRetriever(CommentaryFetcher(context, settings), settings)
        outcome = retriever.retrieve("calvinism", "约 3:16", max_sources=1)

        data = outcome.to_dict()
        assert data["parsed_verse"]["book"] == "JHN"
        assert data["commentaries"][0]["code"] == "cal"
        assert '"约 3:16"' in outcome.to_json()

    def test_context_reaches_fetcher(self, context, settings, session, response_factory, calvin_html):
        session.get.return_value = response_factory(200, calvin_html)
        retriever = CommentaryRetriever(settings=settings, context=context)
        retriever.retrieve("calvinism", "John 3:16", max_sources=1)

        assert retriever.fetcher.context is context
        assert ("cal", "JHN", 3) in context.cache


class TestFallback:
    """Test the "always some result" behaviour."""

    def test_usable_commentaries_fallback(self, settings):
        outcome = CommentaryRetriever(stub_fetcher({"cal": "error"}), settings).retrieve(
            "calvinism", "John 3:16", max_sources=1
        )
        usable = outcome.usable_commentaries()
        assert len(usable) == 1
        assert usable[0].name == "General Theological Knowledge"
        assert usable[0].author == "System"

    def test_usable_commentaries_prefers_real_ones(self, settings):
        outcome = CommentaryRetriever(stub_fetcher({}), settings).retrieve(
            "calvinism", "John 3:16", max_sources=2
        )
        assert outcome.usable_commentaries() == outcome.commentaries


class TestDeadline:
    """Test the wall-clock ceiling around retrieval."""

    def test_completes_in_time(self, settings):
        retriever = CommentaryRetriever(stub_fetcher({}), settings)
        outcome = retrieve_with_deadline(retriever, "calvinism", "John 3:16", timeout=5, max_sources=2)
        assert not outcome.timed_out
        assert len(outcome.commentaries) == 2

    def test_timeout_returns_fallback(self, settings):
        release = threading.Event()
        fetcher = Mock(spec=CommentaryFetcher)
        fetcher.fetch.side_effect = lambda *args, **kwargs: release.wait(5) and FetchResult("late")
        retriever = CommentaryRetriever(fetcher, settings)
        try:
            outcome = retrieve_with_deadline(retriever, "calvinism", "John 3:16", timeout=0.05)
        finally:
            release.set()

        assert outcome.timed_out
        assert outcome.commentaries == []
        assert outcome.parsed_verse.book == "JHN"
        usable = outcome.usable_commentaries()
        assert usable[0].content.startswith("Commentary retrieval timed out")

    def test_parse_errors_raised_up_front(self, settings):
        fetcher = stub_fetcher({})
        with pytest.raises(ReferenceBoundsError):
            retrieve_with_deadline(CommentaryRetriever(fetcher, settings), "calvinism", "John 22:1")
        fetcher.fetch.assert_not_called()

    def test_unknown_denomination_raised_up_front(self, settings):
        with pytest.raises(UnknownDenominationError):
            retrieve_with_deadline(CommentaryRetriever(stub_fetcher({}), settings), "gnosticism", "John 3:16")

    def test_verse_limit_passes_through(self, settings):
        result = retrieve_with_deadline(
            CommentaryRetriever(stub_fetcher({}), settings), "calvinism", "John 3:1-36", max_verses=30
        )
        assert isinstance(result, VerseLimitExceeded)


class TestPromptFormatting:
    def test_numbered_citations(self):
        commentaries = [
            Commentary("Calvin's Commentary on the Bible", "John Calvin", "cal", "First text.", "StudyLight.org"),
            Commentary("Matthew Henry's Complete Commentary", "Matthew Henry", "mhc", "Second text.", "StudyLight.org"),
        ]
        text = format_commentaries_for_prompt(commentaries)
        assert "[1] **Calvin's Commentary on the Bible by John Calvin:**\nFirst text.\n---" in text
        assert "[2] **Matthew Henry's Complete Commentary by Matthew Henry:**\nSecond text.\n---" in text
        assert text.index("[1]") < text.index("[2]")
