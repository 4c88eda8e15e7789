"""Data models for commentary retrieval."""

import json
from dataclasses import dataclass, field, asdict
from typing import Optional

from .errors import FetchErrorKind
from .messages import message


@dataclass(frozen=True)
class VerseReference:
    """A validated passage: one chapter of one book, one verse or a verse range."""

    book: str  # Canonical book code, e.g. "JHN"
    book_name: str = field(compare=False)  # Book token as typed, e.g. "约" or "john"
    chapter: int
    start_verse: Optional[int] = None
    end_verse: Optional[int] = None  # None for a single-verse reference

    @property
    def verse_count(self) -> int:
        if self.start_verse is None:
            return 0
        if self.end_verse is None:
            return 1
        return self.end_verse - self.start_verse + 1

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CommentarySource:
    """A commentary available on StudyLight.org."""

    code: str  # StudyLight code, e.g. "cal"
    name: str  # e.g. "Calvin's Commentary"
    author: str  # e.g. "John Calvin"


@dataclass
class FetchResult:
    """Text for one source, or the reason there is none.

    ``content`` always holds readable text: the filtered commentary on
    success, otherwise the error or "no commentary" sentinel message.
    """

    content: str
    error: Optional[FetchErrorKind] = None
    url: str = ""
    source: str = "StudyLight.org"
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class Commentary:
    """A successfully retrieved commentary."""

    name: str
    author: str
    code: str
    content: str
    source: str
    url: Optional[str] = None
    success: bool = True


@dataclass
class FailedCommentary:
    """A source that failed or had nothing for the requested verses."""

    name: str
    author: str
    error: str
    code: str = ""
    reason: Optional[str] = None  # FetchErrorKind value
    success: bool = False


@dataclass
class RetrievalOutcome:
    """Commentaries for one passage, split into usable and failed sources."""

    denomination: str
    passage: str
    parsed_verse: VerseReference
    commentaries: list[Commentary] = field(default_factory=list)
    failed_commentaries: list[FailedCommentary] = field(default_factory=list)
    retrieved_at: str = ""
    timed_out: bool = False

    def usable_commentaries(self, language: str = "en") -> list[Commentary]:
        """Successful commentaries, or a single general-knowledge placeholder."""
        if self.commentaries:
            return list(self.commentaries)
        key = "fallback_timeout" if self.timed_out else "fallback_commentary"
        return [Commentary(
            name="General Theological Knowledge",
            author="System",
            code="",
            content=message(key, language),
            source="System",
        )]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


@dataclass
class VerseLimitExceeded:
    """Returned instead of an outcome when the range is larger than allowed."""

    error: str
    verse_count: int
    max_verses: int

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
