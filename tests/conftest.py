"""Shared fixtures: commentary page HTML, stub HTTP responses and an isolated fetch context."""

import random
from unittest.mock import Mock

import pytest
import requests

from bible_commentary.config import Settings
from bible_commentary.fetcher import RateLimiter, RetrievalContext


CALVIN_JOHN_3_HTML = """
<html>
<head><title>John 3 - Calvin</title><script>var tracker = 1;</script></head>
<body>
<nav><a href="/">Home</a> <a href="/commentaries">Commentaries</a></nav>
<div class="cookie-banner">We use cookies to improve the site.</div>
<div class="content">
  <h2>Chapter 3</h2>
  <p>Nicodemus comes to Jesus by night, and the conversation turns on the new birth and on the
  kingdom which no man can see unless he is born from above.</p>
  <h3>Verse 14</h3>
  <p>As Moses lifted up the serpent in the wilderness, so the Son of man must be lifted up. The
  brazen serpent was a figure of the remedy God appointed for the dying people.</p>
  <h3>Verse 16</h3>
  <p>For God so loved the world. Christ here opens the first cause and, as it were, the source of
  our salvation, and he does so that no doubt may remain: the love of God is the ground of it.</p>
  <p>That whosoever believeth in him should not perish. The outstanding thing about faith is that
  it delivers us from everlasting destruction.</p>
  <h3>Verses 17-18</h3>
  <p>For God sent not his Son into the world to condemn the world. It is a confirmation of the
  preceding statement, for it was not in vain that God sent his own Son to men.</p>
</div>
<footer>Copyright Statement: these files are public domain.</footer>
</body>
</html>
"""

HENRY_JOHN_3_HTML = """
<html>
<body>
<header><div class="menu">Books | Chapters | Authors</div></header>
<div class="content">
  <p>In this chapter we have Christ's discourse with Nicodemus, a Pharisee and a ruler of the Jews,
  concerning the great mysteries of the gospel.</p>
  <h3>Verses 1-13</h3>
  <p>There was a man of the Pharisees named Nicodemus who came to Jesus by night, being desirous to
  be better acquainted with him, and yet afraid to be seen with him.</p>
  <h3>Verses 14-18</h3>
  <p>Here is the gospel indeed, good news, the best that ever came from heaven to earth. Here is
  the love of God in giving his Son for the world, and the design of that gift.</p>
  <p>The love of God is the spring and fountain of all, and it is here magnified in the most
  unspeakable gift of his only begotten Son.</p>
</div>
<div class="sidebar">Related resources and reading plans.</div>
</body>
</html>
"""

BIBLEHUB_JOHN_3_HTML = """
<html>
<body>
<div class="chap">
  <p>For God so loved the world - The love of God is here declared in its greatest extent, for it
  reached to the world lying in wickedness, and was shown in the gift of his only Son.</p>
  <p>That whosoever believeth - That all who trust in him, of every nation and rank, might be
  saved from the ruin into which sin had brought them, and have everlasting life.</p>
</div>
</body>
</html>
"""


class FakeClock:
    """Monotonic clock that only moves when told to (or when something sleeps)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_response(status_code: int = 200, text: str = "") -> Mock:
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    return response


@pytest.fixture
def calvin_html():
    return CALVIN_JOHN_3_HTML


@pytest.fixture
def henry_html():
    return HENRY_JOHN_3_HTML


@pytest.fixture
def biblehub_html():
    return BIBLEHUB_JOHN_3_HTML


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        scraperapi_key="",
        use_alternative_sources=False,
        max_commentaries=3,
        max_verses=30,
    )


@pytest.fixture
def proxy_settings():
    return Settings(
        _env_file=None,
        scraperapi_key="test-key",
        use_alternative_sources=False,
        max_commentaries=3,
        max_verses=30,
    )


@pytest.fixture
def context(session, clock):
    """A fetch context that never really sleeps."""
    limiter = RateLimiter(clock=clock, sleep=clock.advance, rng=random.Random(0))
    return RetrievalContext(
        session=session,
        rate_limiter=limiter,
        sleep=Mock(),
        rng=random.Random(0),
    )
