"""Turn a commentary page into clean prose."""

import json
import logging
import re
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Optional, Union

from bs4 import BeautifulSoup
from bs4.element import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

BOILERPLATE_RULES_FILE = "boilerplate_rules.json"

# Tried in order; the first one holding enough text wins.
MAIN_CONTENT_SELECTORS = [
    ".content",
    ".commentary",
    "#commentary",
    ".main-content",
    "#main-content",
    "article",
    "main",
    ".article-content",
    '[role="main"]',
]

MIN_CONTENT_LENGTH = 500

BLOCK_TAGS = {"p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "br", "tr"}
SKIP_TAGS = {"script", "style", "noscript"}
_NON_TEXT_NODES = (Comment, Declaration, Doctype, ProcessingInstruction)


# =============================================================================
# Boilerplate rules
# =============================================================================

@dataclass(frozen=True)
class BoilerplateRules:
    """Site furniture to strip: elements removed before extraction and lines dropped after."""

    version: int
    remove_selectors: tuple[str, ...]
    line_patterns: tuple[re.Pattern, ...]
    title_suffixes: tuple[str, ...]
    short_title_suffix: str = "Commentary"
    short_title_max_words: int = 3
    min_line_length: int = 3

    @classmethod
    def from_dict(cls, data: dict) -> "BoilerplateRules":
        return cls(
            version=data.get("version", 1),
            remove_selectors=tuple(data.get("remove_selectors", [])),
            line_patterns=tuple(re.compile(p) for p in data.get("line_patterns", [])),
            title_suffixes=tuple(data.get("title_suffixes", [])),
            short_title_suffix=data.get("short_title_suffix", "Commentary"),
            short_title_max_words=data.get("short_title_max_words", 3),
            min_line_length=data.get("min_line_length", 3),
        )

    def is_boilerplate(self, line: str) -> bool:
        if len(line) < self.min_line_length:
            return True
        if any(pattern.search(line) for pattern in self.line_patterns):
            return True
        if any(line.endswith(suffix) for suffix in self.title_suffixes):
            return True
        return (
            line.endswith(self.short_title_suffix)
            and len(line.split()) <= self.short_title_max_words
        )


def load_rules(path: Optional[Union[str, Path]] = None) -> BoilerplateRules:
    """Load a rule set from ``path``, or the packaged default rules."""
    if path is None:
        source = resources.files("bible_commentary") / "data" / BOILERPLATE_RULES_FILE
    else:
        source = Path(path)
    with source.open("r", encoding="utf-8") as f:
        return BoilerplateRules.from_dict(json.load(f))


_default_rules: Optional[BoilerplateRules] = None


def default_rules() -> BoilerplateRules:
    global _default_rules
    if _default_rules is None:
        _default_rules = load_rules()
    return _default_rules


# =============================================================================
# Extraction
# =============================================================================

def extract_node_text(node) -> str:
    """Recursively collect text, putting block-level elements on their own lines."""
    if isinstance(node, _NON_TEXT_NODES):
        return ""
    if isinstance(node, NavigableString):
        text = node.strip()
        return text + " " if text else ""
    if not isinstance(node, Tag) or node.name in SKIP_TAGS:
        return ""
    if node.name == "br":
        return "\n"

    text = "".join(extract_node_text(child) for child in node.children)

    if node.name in BLOCK_TAGS and text.strip():
        text = "\n" + text.strip() + "\n"
    return text


def clean_text(text: str, rules: BoilerplateRules) -> str:
    """Normalize whitespace, then drop lines classified as boilerplate."""
    text = re.sub(r" +", " ", text)
    text = re.sub(r"\n[ \t]+", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = text.strip()

    kept = []
    for line in text.split("\n"):
        stripped = line.strip()
        if not stripped or rules.is_boilerplate(stripped):
            continue
        kept.append(stripped)
    return "\n".join(kept)


def unavailable_message(book: Optional[str] = None, chapter: Optional[int] = None) -> str:
    if book is None:
        return "Commentary not available from this source."
    return f"Commentary not available for {book} {chapter} from this source."


def extract_text(
    html: str,
    book: Optional[str] = None,
    chapter: Optional[int] = None,
    rules: Optional[BoilerplateRules] = None,
) -> str:
    """
    Extract commentary prose from an HTML page.

    Args:
        html: Raw page HTML
        book: Book code, used only in the placeholder for an empty page
        chapter: Chapter number, used only in the placeholder for an empty page
        rules: Boilerplate rule set (defaults to the packaged rules)

    Returns:
        Clean text, or a "Commentary not available" placeholder if nothing survives
    """
    rules = rules or default_rules()
    soup = BeautifulSoup(html, "html.parser")

    for selector in rules.remove_selectors:
        for element in soup.select(selector):
            if not element.decomposed:
                element.decompose()

    text = ""
    for selector in MAIN_CONTENT_SELECTORS:
        container = soup.select_one(selector)
        if container is None:
            continue
        candidate = extract_node_text(container)
        if len(candidate) > MIN_CONTENT_LENGTH:
            logger.debug("Main content found with selector %r", selector)
            text = candidate
            break
    else:
        root = soup.body or soup
        text = extract_node_text(root)

    text = clean_text(text, rules)

    logger.info("Extracted commentary length: %d characters", len(text))
    if len(text) < MIN_CONTENT_LENGTH:
        logger.warning("Short commentary extracted: %r", text[:200])

    if not text:
        return unavailable_message(book, chapter)
    return text
