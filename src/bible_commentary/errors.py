"""Exception types and the fetch error tags."""

from enum import Enum

from .messages import message


class CommentaryError(Exception):
    """Base class for errors raised by this package."""


class ParseError(CommentaryError, ValueError):
    """A passage string the user must correct. Carries a localized message."""

    def __init__(self, key: str, language: str = "en", **params):
        self.key = key
        self.language = language
        self.params = params
        super().__init__(message(key, language, **params))


class ReferenceFormatError(ParseError):
    """Input does not parse: book-only, chapter-only, unknown book, or bad grammar."""


class ReferenceBoundsError(ParseError):
    """Input parses but violates the canonical book/chapter/verse bounds."""


class UnknownDenominationError(CommentaryError, KeyError):
    """No commentary sources are configured for the denomination."""

    def __init__(self, denomination: str):
        self.denomination = denomination
        super().__init__(denomination)

    def __str__(self) -> str:
        return message("unknown_denomination", denomination=self.denomination)


class FetchErrorKind(str, Enum):
    """Why a single commentary source produced no usable text."""

    NOT_FOUND = "not_found"
    BLOCKED = "blocked"
    TIMEOUT = "timeout"
    NETWORK = "network"
    HTTP = "http"
    NO_CONTENT_FOR_RANGE = "no_content_for_range"
    EXHAUSTED = "exhausted"
