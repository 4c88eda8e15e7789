#!/usr/bin/env python3
"""
CLI for Bible Commentary - Retrieves denomination-specific commentaries from StudyLight.org.

Usage:
    python -m bible_commentary "John 3:16"                       # Calvinist commentaries
    python -m bible_commentary "太5:1-12" -d catholicism -l zh   # Chinese input and messages
    python -m bible_commentary "Romans 8:28" -s mhc -s bnb       # Pick sources explicitly
    python -m bible_commentary --list-sources                   # Show configured sources
"""

import argparse
import logging
from typing import Optional

from .config import get_settings
from .errors import ParseError, UnknownDenominationError
from .fetcher import RetrievalContext
from .logging_config import setup_logging
from .models import RetrievalOutcome, VerseLimitExceeded
from .retriever import CommentaryRetriever, retrieve_with_deadline
from .sources import COMMENTARY_SOURCES, DENOMINATIONS


# =============================================================================
# Output
# =============================================================================

PREVIEW_LENGTH = 600


def print_sources():
    """Print every denomination and its ordered commentary sources."""
    print("📚 Commentary sources")
    print("=" * 60)
    for denomination, sources in COMMENTARY_SOURCES.items():
        print(f"{denomination}:")
        for source in sources:
            print(f"   {source.code:<5} {source.name} ({source.author})")
    print("=" * 60)


def print_outcome(outcome: RetrievalOutcome, language: str = "en", full: bool = False):
    """Print a retrieval outcome in a human-readable form."""
    ref = outcome.parsed_verse
    verses = f"{ref.start_verse}-{ref.end_verse}" if ref.end_verse else f"{ref.start_verse}"

    print(f"📖 {outcome.passage} ({ref.book} {ref.chapter}:{verses}) - {outcome.denomination}")
    print("=" * 60)

    if outcome.timed_out:
        print("⏱ Retrieval timed out")

    for i, commentary in enumerate(outcome.usable_commentaries(language), 1):
        content = commentary.content
        if not full and len(content) > PREVIEW_LENGTH:
            content = content[:PREVIEW_LENGTH] + "..."
        print(f"[{i}] {commentary.name} by {commentary.author}")
        print(f"    {commentary.source}")
        if commentary.url:
            print(f"    {commentary.url}")
        print()
        print(content)
        print("-" * 60)

    for failed in outcome.failed_commentaries:
        print(f"❌ {failed.name}: {failed.error}")

    print("=" * 60)
    print(f"✅ {len(outcome.commentaries)} retrieved, {len(outcome.failed_commentaries)} failed")


# =============================================================================
# CLI Entry Point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Retrieve Bible commentaries for a passage from a theological tradition."
    )
    parser.add_argument(
        "passage",
        nargs="?",
        help="Passage, e.g. 'John 3:16', 'Matthew 5:1-12', '太5:1-12'"
    )
    parser.add_argument(
        "--denomination", "-d",
        type=str,
        default="calvinism",
        help=f"Theological tradition (default: calvinism; one of {', '.join(DENOMINATIONS)})"
    )
    parser.add_argument(
        "--language", "-l",
        type=str,
        default="en",
        help="Language for messages, 'en' or 'zh' (default: en)"
    )
    parser.add_argument(
        "--max-sources", "-n",
        type=int,
        default=settings.max_commentaries,
        help=f"Number of commentaries to retrieve (default: {settings.max_commentaries})"
    )
    parser.add_argument(
        "--max-verses",
        type=int,
        default=settings.max_verses,
        help=f"Largest verse range accepted (default: {settings.max_verses})"
    )
    parser.add_argument(
        "--source", "-s",
        action="append",
        dest="sources",
        help="Commentary code to use; repeat for several (e.g. -s mhc -s bnb)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.retrieval_timeout,
        help=f"Overall time limit in seconds (default: {settings.retrieval_timeout:g})"
    )
    parser.add_argument("--json", action="store_true", help="Print the outcome as JSON")
    parser.add_argument("--full", action="store_true", help="Print full commentary text")
    parser.add_argument("--list-sources", action="store_true", help="List commentary sources and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log fetch activity to stderr")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else get_settings().log_level)

    if args.list_sources:
        print_sources()
        return 0

    if not args.passage:
        parser.error("a passage is required")

    retriever = CommentaryRetriever(context=RetrievalContext())
    try:
        outcome = retrieve_with_deadline(
            retriever,
            args.denomination,
            args.passage,
            timeout=args.timeout,
            max_sources=args.max_sources,
            language=args.language,
            selected_sources=args.sources,
            max_verses=args.max_verses,
        )
    except (ParseError, UnknownDenominationError) as e:
        print(f"❌ {e}")
        return 2

    if isinstance(outcome, VerseLimitExceeded):
        print(outcome.to_json() if args.json else f"❌ {outcome.error}")
        return 1

    if args.json:
        print(outcome.to_json())
    else:
        print_outcome(outcome, args.language, full=args.full)
    return 0


if __name__ == "__main__":
    exit(main())
