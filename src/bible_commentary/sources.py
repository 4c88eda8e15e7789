"""StudyLight.org commentary sources grouped by theological tradition."""

from .books import get_book
from .errors import UnknownDenominationError
from .models import CommentarySource

STUDYLIGHT_BASE_URL = "https://www.studylight.org/commentaries"
STUDYLIGHT_LANGUAGE = "eng"

COMMENTARY_SOURCES: dict[str, list[CommentarySource]] = {
    "calvinism": [
        CommentarySource("cal", "Calvin's Commentary on the Bible", "John Calvin"),
        CommentarySource("mhc", "Matthew Henry's Complete Commentary", "Matthew Henry"),
        CommentarySource("geb", "Gill's Exposition of the Whole Bible", "John Gill"),
        CommentarySource("spe", "Spurgeon's Verse Expositions of the Bible", "Charles Spurgeon"),
        CommentarySource("bnb", "Barnes' Notes on the Whole Bible", "Albert Barnes"),
    ],
    "arminianism": [
        CommentarySource("wen", "Wesley's Explanatory Notes", "John Wesley"),
        CommentarySource("acc", "Adam Clarke Commentary", "Adam Clarke"),
        CommentarySource("rbc", "Benson's Commentary", "Joseph Benson"),
        CommentarySource("whe", "Whedon's Commentary on the Bible", "Daniel Whedon"),
    ],
    "dispensationalism": [
        CommentarySource("srn", "Scofield's Reference Notes", "C. I. Scofield"),
        CommentarySource("dsn", "Darby's Synopsis of the Bible", "John Nelson Darby"),
        CommentarySource("isn", "Ironside's Notes on Selected Books", "Harry A. Ironside"),
        CommentarySource("gab", "Gaebelein's Annotated Bible", "Arno C. Gaebelein"),
    ],
    "lutheranism": [
        CommentarySource("kpc", "Kretzmann's Popular Commentary", "Paul E. Kretzmann"),
        CommentarySource("jab", "Bengel's Gnomon of the New Testament", "Johann Albrecht Bengel"),
        CommentarySource("mlg", "Luther's Commentary on Galatians", "Martin Luther"),
    ],
    "catholicism": [
        CommentarySource("hcc", "Haydock's Catholic Bible Commentary", "George Leo Haydock"),
        CommentarySource("clc", "Lapide's Great Commentary", "Cornelius a Lapide"),
    ],
}

DENOMINATIONS = list(COMMENTARY_SOURCES)


def get_sources(denomination: str) -> list[CommentarySource]:
    """Ordered commentary sources for a denomination."""
    try:
        return list(COMMENTARY_SOURCES[denomination])
    except KeyError:
        raise UnknownDenominationError(denomination) from None


def commentary_url(code: str, book: str, chapter: int, language: str = STUDYLIGHT_LANGUAGE) -> str:
    """StudyLight URL of one chapter of a commentary, e.g. .../eng/mhc/john-3.html."""
    entry = get_book(book)
    slug = entry.studylight if entry else book.lower()
    return f"{STUDYLIGHT_BASE_URL}/{language}/{code}/{slug}-{chapter}.html"
