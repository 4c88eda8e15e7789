"""
Bible Commentary - Retrieves denomination-specific Bible commentaries from StudyLight.org,
with English and Chinese passage parsing.
"""

from .errors import (
    CommentaryError,
    FetchErrorKind,
    ParseError,
    ReferenceBoundsError,
    ReferenceFormatError,
    UnknownDenominationError,
)
from .fetcher import CommentaryFetcher, RateLimiter, RetrievalContext, fetch_commentary
from .models import (
    Commentary,
    CommentarySource,
    FailedCommentary,
    FetchResult,
    RetrievalOutcome,
    VerseLimitExceeded,
    VerseReference,
)
from .parser import parse_verse_reference
from .retriever import (
    CommentaryRetriever,
    count_verses,
    format_commentaries_for_prompt,
    retrieve_with_deadline,
)
from .sources import COMMENTARY_SOURCES, DENOMINATIONS

__all__ = [
    "CommentaryError",
    "FetchErrorKind",
    "ParseError",
    "ReferenceBoundsError",
    "ReferenceFormatError",
    "UnknownDenominationError",
    "CommentaryFetcher",
    "RateLimiter",
    "RetrievalContext",
    "fetch_commentary",
    "Commentary",
    "CommentarySource",
    "FailedCommentary",
    "FetchResult",
    "RetrievalOutcome",
    "VerseLimitExceeded",
    "VerseReference",
    "parse_verse_reference",
    "CommentaryRetriever",
    "count_verses",
    "format_commentaries_for_prompt",
    "retrieve_with_deadline",
    "COMMENTARY_SOURCES",
    "DENOMINATIONS",
]

__version__ = "0.1.0"
