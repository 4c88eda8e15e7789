"""
Fetch commentary chapters from StudyLight.org.

Requests are throttled by a process-wide RateLimiter, optionally routed
through ScraperAPI, retried on blocks and timeouts, and finally handed to
Bible Hub when StudyLight keeps refusing. Ordinary failures are returned as
FetchResult values, never raised.
"""

import logging
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Optional

import requests

from .alternative import ALTERNATIVE_MARKER, BIBLEHUB_SOURCE, BibleHubFetcher
from .config import Settings, get_settings
from .errors import FetchErrorKind
from .extractor import extract_text
from .models import FetchResult
from .session import browser_headers, build_session
from .sources import commentary_url
from .verse_filter import filter_commentary_by_verses, is_no_content

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

STUDYLIGHT_SOURCE = "StudyLight.org"
ERROR_PREFIX = "Error retrieving commentary:"
SCRAPERAPI_URL = "http://api.scraperapi.com"

MAX_RETRIES = 2
BLOCK_BACKOFF = 3.0
BLOCKED_STATUSES = {403, 429}


def is_error(text: str) -> bool:
    return text.startswith(ERROR_PREFIX)


# =============================================================================
# Rate limiting
# =============================================================================

class RateLimiter:
    """Adaptive minimum delay between outbound requests.

    The delay grows after a burst of requests, decays slowly while requests
    succeed, and snaps back to the base after a quiet period.
    """

    def __init__(
        self,
        base_delay: float = 1.5,
        max_delay: float = 10.0,
        jitter: float = 0.2,
        burst_threshold: int = 5,
        growth: float = 1.5,
        decay: float = 0.9,
        idle_reset: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.burst_threshold = burst_threshold
        self.growth = growth
        self.decay = decay
        self.idle_reset = idle_reset
        self.clock = clock
        self.sleep = sleep
        self.rng = rng or random.Random()

        self.current_delay = base_delay
        self.request_count = 0
        self.last_request_time: Optional[float] = None

    def jittered(self, delay: float) -> float:
        return delay * (1 + self.jitter * (2 * self.rng.random() - 1))

    def wait(self) -> float:
        """Block until the next request may go out. Returns the time slept."""
        now = self.clock()
        if self.last_request_time is not None and now - self.last_request_time > self.idle_reset:
            logger.debug("Idle for %.0fs, resetting request delay", now - self.last_request_time)
            self.reset()

        self.request_count += 1
        if self.request_count > self.burst_threshold:
            self.current_delay = min(self.current_delay * self.growth, self.max_delay)
            self.request_count = 0
            logger.info("Request burst detected, delay raised to %.2fs", self.current_delay)

        slept = 0.0
        if self.last_request_time is not None:
            elapsed = now - self.last_request_time
            target = self.jittered(self.current_delay)
            if elapsed < target:
                slept = target - elapsed
                self.sleep(slept)

        self.last_request_time = self.clock()
        return slept

    def record_success(self):
        self.current_delay = max(self.base_delay, self.current_delay * self.decay)

    def reset(self):
        self.current_delay = self.base_delay
        self.request_count = 0


# =============================================================================
# Shared state
# =============================================================================

@dataclass
class RetrievalContext:
    """Fetch state shared by the fetchers it is passed to: HTTP session, rate limiter,
    chapter cache and block counter.

    The cache maps (source code, book, chapter) to the cleaned chapter text,
    before any verse filtering. ``default()`` hands out one process-wide
    instance for callers that ask for it; nothing uses it implicitly.
    """

    session: requests.Session = field(default_factory=build_session)
    rate_limiter: RateLimiter = field(default_factory=RateLimiter)
    cache: dict[tuple[str, str, int], str] = field(default_factory=dict)
    sleep: Callable[[float], None] = time.sleep
    rng: random.Random = field(default_factory=random.Random)
    blocked_count: int = 0

    _default: ClassVar[Optional["RetrievalContext"]] = None
    _default_lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def default(cls) -> "RetrievalContext":
        with cls._default_lock:
            if cls._default is None:
                cls._default = cls()
            return cls._default

    def clear_cache(self):
        self.cache.clear()
        logger.info("Commentary cache cleared")


# =============================================================================
# Fetch client
# =============================================================================

class CommentaryFetcher:
    """Downloads, cleans and verse-filters one commentary chapter at a time."""

    def __init__(
        self,
        context: Optional[RetrievalContext] = None,
        settings: Optional[Settings] = None,
        alternative: Optional[BibleHubFetcher] = None,
    ):
        self.context = context if context is not None else RetrievalContext()
        self.settings = settings or get_settings()
        self.alternative = alternative

    def fetch(
        self,
        code: str,
        book: str,
        chapter: int,
        start_verse: Optional[int] = None,
        end_verse: Optional[int] = None,
    ) -> FetchResult:
        """
        Fetch one commentary's text for a passage.

        Args:
            code: StudyLight commentary code, e.g. "mhc"
            book: Canonical book code
            chapter: Chapter number
            start_verse: First verse to keep (None keeps the whole chapter)
            end_verse: Last verse to keep

        Returns:
            FetchResult; ``error`` is set and ``content`` holds a readable
            message when nothing usable came back
        """
        url = commentary_url(code, book, chapter)
        cached = self.context.cache.get((code, book, chapter))
        if cached is not None:
            logger.info("Using cached commentary for %s %s %d", code, book, chapter)
            source = BIBLEHUB_SOURCE if cached.startswith(ALTERNATIVE_MARKER) else STUDYLIGHT_SOURCE
            return self._finish(cached, url, start_verse, end_verse, source=source, from_cache=True)

        return self._download(code, book, chapter, url, start_verse, end_verse)

    def _download(self, code, book, chapter, url, start_verse, end_verse) -> FetchResult:
        use_proxy = self.settings.proxy_enabled
        failures: list[FetchErrorKind] = []
        reason = ""

        for attempt in range(1, MAX_RETRIES + 2):
            self.context.rate_limiter.wait()
            try:
                response = self._request(url, use_proxy)
            except requests.Timeout as e:
                failures.append(FetchErrorKind.TIMEOUT)
                reason = f"request timed out ({self._redact(e)})"
                logger.warning("Attempt %d timed out for %s", attempt, url)
                if use_proxy:
                    logger.warning("Proxy timed out, retrying with a direct connection")
                    use_proxy = False
                continue
            except requests.RequestException as e:
                failures.append(FetchErrorKind.NETWORK)
                reason = self._redact(e)
                logger.warning("Attempt %d failed for %s: %s", attempt, url, reason)
                if use_proxy:
                    logger.warning("Proxy request failed, retrying with a direct connection")
                    use_proxy = False
                continue

            status = response.status_code
            if status == 404:
                logger.warning("Commentary not found (404): %s", url)
                return self._failure(FetchErrorKind.NOT_FOUND, "Commentary not found (404)", url)

            if status in BLOCKED_STATUSES:
                failures.append(FetchErrorKind.BLOCKED)
                reason = f"blocked by site (HTTP {status})"
                self.context.blocked_count += 1
                if use_proxy:
                    logger.warning("Proxy blocked (HTTP %d), retrying with a direct connection", status)
                    use_proxy = False
                elif attempt <= MAX_RETRIES:
                    backoff = BLOCK_BACKOFF * attempt
                    logger.warning("Blocked (HTTP %d), backing off %.0fs", status, backoff)
                    self.context.sleep(backoff)
                continue

            if status >= 400:
                failures.append(FetchErrorKind.HTTP)
                reason = f"HTTP {status}"
                logger.warning("Attempt %d got HTTP %d for %s", attempt, status, url)
                if use_proxy:
                    use_proxy = False
                continue

            text = extract_text(response.text, book, chapter)
            self.context.cache[(code, book, chapter)] = text
            self.context.rate_limiter.record_success()
            return self._finish(text, url, start_verse, end_verse)

        kind = self._classify(failures)
        if kind in (FetchErrorKind.BLOCKED, FetchErrorKind.TIMEOUT) and self._alternatives_enabled():
            return self._fetch_alternative(code, book, chapter, url, start_verse, end_verse, reason)

        return self._failure(kind, reason, url)

    def _request(self, url: str, use_proxy: bool) -> requests.Response:
        headers = browser_headers(self.context.rng)
        if use_proxy:
            logger.info("Fetching via ScraperAPI: %s", url)
            return self.context.session.get(
                SCRAPERAPI_URL,
                params={"api_key": self.settings.scraperapi_key, "url": url, "render": "false"},
                headers=headers,
                timeout=self.settings.proxy_timeout,
            )
        logger.info("Fetching commentary: %s", url)
        return self.context.session.get(url, headers=headers, timeout=self.settings.direct_timeout)

    def _redact(self, error: Exception) -> str:
        """Exception text with the proxy API key masked."""
        text = str(error)
        key = self.settings.scraperapi_key
        return text.replace(key, "***") if key else text

    @staticmethod
    def _classify(failures: list[FetchErrorKind]) -> FetchErrorKind:
        if FetchErrorKind.BLOCKED in failures:
            return FetchErrorKind.BLOCKED
        if FetchErrorKind.TIMEOUT in failures:
            return FetchErrorKind.TIMEOUT
        return failures[-1] if failures else FetchErrorKind.EXHAUSTED

    def _alternatives_enabled(self) -> bool:
        return self.settings.use_alternative_sources or self.context.blocked_count > 0

    def _fetch_alternative(self, code, book, chapter, url, start_verse, end_verse, reason) -> FetchResult:
        if self.alternative is None:
            self.alternative = BibleHubFetcher(
                session=self.context.session,
                timeout=self.settings.alternative_timeout,
                sleep=self.context.sleep,
                rng=self.context.rng,
            )

        logger.warning("StudyLight unavailable for %s, trying %s", code, BIBLEHUB_SOURCE)
        result = self.alternative.fetch(book, chapter, start_verse)
        if not result.ok:
            return self._failure(
                FetchErrorKind.EXHAUSTED,
                f"{reason}; alternative source failed: {result.error_summary()}",
                url,
            )

        text = result.to_text()
        self.context.cache[(code, book, chapter)] = text
        return self._finish(text, result.url, start_verse, end_verse, source=BIBLEHUB_SOURCE)

    def _finish(
        self,
        text: str,
        url: str,
        start_verse: Optional[int],
        end_verse: Optional[int],
        source: str = STUDYLIGHT_SOURCE,
        from_cache: bool = False,
    ) -> FetchResult:
        filtered = filter_commentary_by_verses(text, start_verse, end_verse)
        if is_no_content(filtered):
            logger.warning("No commentary for the requested verses at %s", url)
            return FetchResult(filtered, FetchErrorKind.NO_CONTENT_FOR_RANGE, url, source, from_cache)
        return FetchResult(filtered, None, url, source, from_cache)

    @staticmethod
    def _failure(kind: FetchErrorKind, reason: str, url: str) -> FetchResult:
        return FetchResult(f"{ERROR_PREFIX} {reason}", kind, url)


def fetch_commentary(
    code: str,
    book: str,
    chapter: int,
    start_verse: Optional[int] = None,
    end_verse: Optional[int] = None,
) -> str:
    """Text of one commentary using the shared context; failures come back as sentinel text."""
    return CommentaryFetcher(RetrievalContext.default()).fetch(code, book, chapter, start_verse, end_verse).content
