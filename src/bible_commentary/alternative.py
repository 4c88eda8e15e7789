"""Bible Hub commentaries, used when StudyLight.org is blocked."""

import logging
import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

import requests
from bs4 import BeautifulSoup

from .books import get_book
from .session import browser_headers, build_session

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

BIBLEHUB_SOURCE = "Bible Hub Commentaries"
ALTERNATIVE_MARKER = "[Alternative Source:"
BIBLEHUB_COMMENTARY_URL = "https://biblehub.com/commentaries/{code}/{book}/{chapter}.htm"

BIBLEHUB_COMMENTARIES = [
    ("barnes", "Barnes' Notes"),
    ("clarke", "Clarke's Commentary"),
    ("gill", "Gill's Exposition"),
    ("henry", "Matthew Henry's Commentary"),
    ("jfb", "Jamieson-Fausset-Brown"),
]

CONTENT_SELECTORS = [".commenttext", ".vcomment", ".text", ".chap"]
FURNITURE_MARKERS = ("Bible Hub", "Copyright", "Navigation")

MIN_SELECTOR_TEXT = 200
MIN_PARAGRAPH_LENGTH = 50
MAX_PARAGRAPHS = 10
MIN_COMMENTARY_LENGTH = 100
MAX_COMMENTARY_LENGTH = 3000


@dataclass
class AlternativeResult:
    """Commentaries gathered from Bible Hub for one chapter."""

    book: str
    chapter: int
    verse: Optional[int] = None
    source: str = BIBLEHUB_SOURCE
    url: str = ""
    commentaries: dict[str, str] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    retrieved_at: str = ""

    @property
    def ok(self) -> bool:
        return bool(self.commentaries)

    def error_summary(self) -> str:
        return "; ".join(self.errors) or "no commentary text found"

    def to_text(self) -> str:
        """Flatten into the same single-text shape StudyLight pages produce."""
        parts = [f"{ALTERNATIVE_MARKER} {self.source}]"]
        for name, text in self.commentaries.items():
            parts.append(f"{name}:\n{text}")
        return "\n\n".join(parts)


def extract_biblehub_text(html: str) -> str:
    """Pull commentary text from a Bible Hub chapter page."""
    soup = BeautifulSoup(html, "html.parser")

    text = ""
    for selector in CONTENT_SELECTORS:
        content = "\n".join(
            el.get_text(" ", strip=True) for el in soup.select(selector)
        ).strip()
        if len(content) > len(text):
            text = content

    if len(text) < MIN_SELECTOR_TEXT:
        paragraphs = []
        for p in soup.find_all("p"):
            para = p.get_text(" ", strip=True)
            if len(para) > MIN_PARAGRAPH_LENGTH and not any(m in para for m in FURNITURE_MARKERS):
                paragraphs.append(para)
        text = "\n\n".join(paragraphs[:MAX_PARAGRAPHS])

    return text


class BibleHubFetcher:
    """Fetches a couple of classic commentaries for a chapter from Bible Hub."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 8.0,
        max_commentaries: int = 2,
        min_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        self.session = session or build_session()
        self.timeout = timeout
        self.max_commentaries = max_commentaries
        self.min_delay = min_delay
        self.sleep = sleep
        self.clock = clock
        self.rng = rng or random.Random()
        self.cache: dict[tuple[str, int, Optional[int]], AlternativeResult] = {}
        self.last_request_time: Optional[float] = None

    def _jittered(self, seconds: float) -> float:
        return seconds + seconds * 0.2 * (self.rng.random() - 0.5)

    def _ensure_delay(self):
        now = self.clock()
        if self.last_request_time is not None:
            elapsed = now - self.last_request_time
            if elapsed < self.min_delay:
                self.sleep(self._jittered(self.min_delay - elapsed))
        self.last_request_time = self.clock()

    def fetch(self, book: str, chapter: int, verse: Optional[int] = None) -> AlternativeResult:
        """
        Fetch Bible Hub commentaries for a chapter.

        Args:
            book: Canonical book code
            chapter: Chapter number
            verse: Verse the caller is interested in (kept for reference only)

        Returns:
            AlternativeResult; ``ok`` is False when nothing usable was found
        """
        key = (book, chapter, verse)
        if key in self.cache:
            logger.info("Using cached Bible Hub commentary for %s %s", book, chapter)
            return self.cache[key]

        result = AlternativeResult(book=book, chapter=chapter, verse=verse)
        entry = get_book(book)
        if entry is None:
            result.errors.append(f"Book {book} not found in Bible Hub mapping")
            return result

        for code, name in BIBLEHUB_COMMENTARIES[:self.max_commentaries]:
            url = BIBLEHUB_COMMENTARY_URL.format(code=code, book=entry.biblehub, chapter=chapter)
            result.url = result.url or url
            self._ensure_delay()
            logger.info("Fetching %s from Bible Hub: %s", name, url)
            try:
                response = self.session.get(
                    url,
                    headers=browser_headers(self.rng, referer="https://biblehub.com/"),
                    timeout=self.timeout,
                )
                response.raise_for_status()
            except requests.RequestException as e:
                logger.warning("Failed to fetch %s: %s", name, e)
                result.errors.append(f"{name}: {e}")
                continue

            text = extract_biblehub_text(response.text)
            if len(text) > MIN_COMMENTARY_LENGTH:
                result.commentaries[name] = text[:MAX_COMMENTARY_LENGTH]
            else:
                result.errors.append(f"{name}: no commentary text found")

        result.retrieved_at = datetime.now(timezone.utc).isoformat()
        if result.ok:
            logger.info("Bible Hub successful: %d commentaries", len(result.commentaries))
            self.cache[key] = result
        else:
            logger.warning("Bible Hub returned nothing for %s %s", book, chapter)
        return result

    def clear_cache(self):
        self.cache.clear()
