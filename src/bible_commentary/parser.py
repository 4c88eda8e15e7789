"""Parse free-text passages ("John 3:16", "太5:1-12", "哥前 7:24-40") into VerseReferences."""

import re

from .books import resolve_book
from .bounds import get_bounds, get_max_chapter, get_max_verse
from .errors import ReferenceBoundsError, ReferenceFormatError
from .models import VerseReference

_VERSES = r"(?P<chapter>\d+)(?::(?P<start>\d+)(?:-(?P<end>\d+))?)?"

# Tried in order. The first three take a non-numeric book token (Chinese in
# practice), the last one a run of Latin words with an optional leading number.
GRAMMARS = [
    # 太:10:4-8
    re.compile(r"^(?P<book>[^\d\s:]+):" + _VERSES + r"$"),
    # 哥前 7:24-40
    re.compile(r"^(?P<book>[^\d\s:]+)\s+" + _VERSES + r"$"),
    # 太5:1-12
    re.compile(r"^(?P<book>[^\d\s:]+)" + _VERSES + r"$"),
    # John 3:16, 1 Corinthians 13:4-7, Song of Solomon 2:1
    re.compile(r"^(?P<book>\d*\s*[A-Za-z][\w.]*(?:\s+[A-Za-z][\w.]*)*)\s+" + _VERSES + r"$"),
]

_FULLWIDTH = str.maketrans({"：": ":", "－": "-", "–": "-", "—": "-", "～": "-", "~": "-"})


def normalize_passage(text: str) -> str:
    """Map full-width punctuation to ASCII and tighten spaces around ':' and '-'."""
    text = text.translate(_FULLWIDTH).strip()
    text = re.sub(r"\s*([:\-])\s*", r"\1", text)
    return re.sub(r"\s+", " ", text)


def parse_verse_reference(text: str, language: str = "en") -> VerseReference:
    """
    Parse and validate a passage reference.

    Args:
        text: User input such as "John 3:16" or "约3:16-18"
        language: Language for error messages ("en" or "zh")

    Returns:
        A VerseReference within canonical bounds

    Raises:
        ReferenceFormatError: book-only, chapter-only, unknown book, unparseable
        ReferenceBoundsError: chapter or verse out of range, start after end
    """
    passage = normalize_passage(text or "")
    first_token = None

    for grammar in GRAMMARS:
        match = grammar.match(passage)
        if not match:
            continue
        token = match.group("book").strip()
        if first_token is None:
            first_token = token
        code = resolve_book(token)
        if code is None:
            continue
        return _build_reference(code, token, match, language)

    if first_token is not None:
        raise ReferenceFormatError("unknown_book", language, book_name=first_token)

    if passage and resolve_book(passage):
        raise ReferenceFormatError("specify_chapter", language, book_name=passage)

    raise ReferenceFormatError("invalid_format", language, input=text)


def _build_reference(code: str, token: str, match: re.Match, language: str) -> VerseReference:
    chapter = int(match.group("chapter"))
    start = match.group("start")
    end = match.group("end")

    if start is None:
        raise ReferenceFormatError("specify_verses", language, book_name=token, chapter=chapter)

    ref = VerseReference(
        book=code,
        book_name=token,
        chapter=chapter,
        start_verse=int(start),
        end_verse=int(end) if end is not None else None,
    )
    validate_reference(ref, language)
    return ref


def validate_reference(ref: VerseReference, language: str = "en") -> None:
    """Check a reference against the bounds table, raising ReferenceBoundsError."""
    if get_bounds(ref.book) is None:
        raise ReferenceFormatError("unknown_book", language, book_name=ref.book_name)

    max_chapter = get_max_chapter(ref.book)
    if not 1 <= ref.chapter <= max_chapter:
        raise ReferenceBoundsError(
            "chapter_out_of_range", language,
            book_name=ref.book_name, chapter=ref.chapter, max_chapter=max_chapter,
        )

    max_verse = get_max_verse(ref.book, ref.chapter)
    for verse in (ref.start_verse, ref.end_verse):
        if verse is not None and not 1 <= verse <= max_verse:
            raise ReferenceBoundsError(
                "verse_out_of_range", language,
                book_name=ref.book_name, chapter=ref.chapter, verse=verse, max_verse=max_verse,
            )

    if ref.end_verse is not None and ref.start_verse > ref.end_verse:
        raise ReferenceBoundsError(
            "verse_order", language,
            book_name=ref.book_name, chapter=ref.chapter,
            start_verse=ref.start_verse, end_verse=ref.end_verse,
        )
