"""Chapter and verse bounds for the 66-book canon.

Loaded once from ``data/bible_structure.json`` (book code -> list of verse
counts per chapter, KJV versification).
"""

import json
from dataclasses import dataclass
from importlib import resources
from typing import Optional

BIBLE_STRUCTURE_FILE = "bible_structure.json"


@dataclass(frozen=True)
class BookBounds:
    chapters: int
    verses_per_chapter: tuple[int, ...]


def load_bible_structure() -> dict[str, list[int]]:
    """Load the Bible structure (book code -> list of verse counts per chapter)."""
    path = resources.files("bible_commentary") / "data" / BIBLE_STRUCTURE_FILE
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


BOUNDS: dict[str, BookBounds] = {
    code: BookBounds(chapters=len(verses), verses_per_chapter=tuple(verses))
    for code, verses in load_bible_structure().items()
}


def get_bounds(book: str) -> Optional[BookBounds]:
    return BOUNDS.get(book)


def get_max_chapter(book: str) -> Optional[int]:
    bounds = BOUNDS.get(book)
    return bounds.chapters if bounds else None


def is_valid_chapter(book: str, chapter: int) -> bool:
    bounds = BOUNDS.get(book)
    return bounds is not None and 1 <= chapter <= bounds.chapters


def get_max_verse(book: str, chapter: int) -> Optional[int]:
    """Number of verses in the chapter, or None for an unknown book/chapter."""
    if not is_valid_chapter(book, chapter):
        return None
    return BOUNDS[book].verses_per_chapter[chapter - 1]


def is_valid_verse(book: str, chapter: int, verse: int) -> bool:
    max_verse = get_max_verse(book, chapter)
    return max_verse is not None and 1 <= verse <= max_verse
