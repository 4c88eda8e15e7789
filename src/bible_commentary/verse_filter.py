"""Narrow a chapter's commentary down to the requested verses.

Commentaries are usually laid out as "Verse N" / "Verses N-M" headers, each
followed by its exposition. The filter degrades in a fixed order:

1. sections whose header range overlaps the request;
2. sections whose body mentions an overlapping verse ("verse 5", "v. 5");
3. an explicit "no commentary available" message listing the covered
   verses, when headers exist but none overlap;
4. the whole text labelled as general commentary, when there are no headers.

Sources that number verses inline without header lines fall through to steps
2 and 4, so their output may be a whole-chapter blob.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

NO_COMMENTARY_PREFIX = "No commentary available for verses"
GENERAL_COMMENTARY_PREFIX = "General commentary (no specific verse breakdown available):"

MIN_GENERAL_LENGTH = 100

VERSE_HEADER_RE = re.compile(r"^Verses?\s+(\d+)(?:\s*[-–]\s*(\d+))?", re.IGNORECASE)
INLINE_VERSE_RE = re.compile(r"\b(?:verses?|v\.)\s*(\d+)(?:\s*[-–]\s*(\d+))?", re.IGNORECASE)


@dataclass
class VerseSection:
    """A header line and the lines under it. Intro text has no range."""

    start_verse: Optional[int]
    end_verse: Optional[int]
    lines: list[str] = field(default_factory=list)

    @property
    def is_intro(self) -> bool:
        return self.start_verse is None

    def overlaps(self, start: int, end: int) -> bool:
        if self.is_intro:
            return False
        return self.start_verse <= end and self.end_verse >= start

    def text(self) -> str:
        return "\n".join(self.lines)

    def label(self) -> str:
        if self.start_verse == self.end_verse:
            return str(self.start_verse)
        return f"{self.start_verse}-{self.end_verse}"


def is_no_content(text: str) -> bool:
    """True for the negative signal returned when a source lacks the verses."""
    return text.startswith(NO_COMMENTARY_PREFIX)


def split_sections(text: str) -> list[VerseSection]:
    sections: list[VerseSection] = []
    current: Optional[VerseSection] = None

    for line in text.split("\n"):
        match = VERSE_HEADER_RE.match(line.strip())
        if match:
            if current is not None:
                sections.append(current)
            start = int(match.group(1))
            end = int(match.group(2)) if match.group(2) else start
            current = VerseSection(start, end, [line])
        elif current is not None:
            current.lines.append(line)
        else:
            current = VerseSection(None, None, [line])

    if current is not None:
        sections.append(current)
    return sections


def _mentions_range(section: VerseSection, start: int, end: int) -> bool:
    for match in INLINE_VERSE_RE.finditer(section.text()):
        ref_start = int(match.group(1))
        ref_end = int(match.group(2)) if match.group(2) else ref_start
        if ref_start <= end and ref_end >= start:
            return True
    return False


def _join(sections: list[VerseSection]) -> str:
    return "\n\n".join(section.text() for section in sections).strip()


def _range_label(start_verse: int, end_verse: Optional[int]) -> str:
    if end_verse and end_verse != start_verse:
        return f"{start_verse}-{end_verse}"
    return str(start_verse)


def filter_commentary_by_verses(text: str, start_verse: Optional[int], end_verse: Optional[int] = None) -> str:
    """
    Keep only the commentary relevant to ``start_verse``..``end_verse``.

    Args:
        text: Clean commentary text for a whole chapter
        start_verse: First requested verse (None returns the text unchanged)
        end_verse: Last requested verse, or None for a single verse

    Returns:
        The matching sections, or a message starting with NO_COMMENTARY_PREFIX
        or GENERAL_COMMENTARY_PREFIX
    """
    if not start_verse:
        return text

    target_end = end_verse or start_verse
    sections = split_sections(text)

    relevant = [s for s in sections if s.overlaps(start_verse, target_end)]
    if relevant:
        return _join(relevant)

    mentioned = [s for s in sections if _mentions_range(s, start_verse, target_end)]
    if mentioned:
        return _join(mentioned)

    requested = _range_label(start_verse, end_verse)
    covered = [s for s in sections if not s.is_intro]
    if covered:
        available = ", ".join(s.label() for s in covered)
        return (
            f"{NO_COMMENTARY_PREFIX} {requested}. "
            f"This commentary only covers verses: {available}"
        )

    cleaned = text.strip()
    if len(cleaned) > MIN_GENERAL_LENGTH:
        return f"{GENERAL_COMMENTARY_PREFIX}\n\n{cleaned}"

    return f"{NO_COMMENTARY_PREFIX} {requested} in this source."
