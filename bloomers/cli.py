"""Spell checker built on the Bloom filter.

The dictionary (one word per line) is loaded into a filter sized for 1% false
positives and persisted to ``words.bf``. Later runs reuse that artifact, and
every word given on the command line that the filter rejects is reported as
misspelled.

    python -m bloomers.cli -f /usr/share/dict/words speling mistaek
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, List, Optional

import structlog

from bloomers.bloom_filter import BloomFilter
from bloomers.codec import open_filter, save
from bloomers.config import Settings, configure_logging, load_settings
from bloomers.errors import BloomError

logger = structlog.get_logger(__name__)


def _raw(word: str) -> bytes:
    # Undecodable bytes round-trip through surrogateescape, as argv does.
    return word.encode("utf-8", "surrogateescape")


def read_dictionary(path: str | Path) -> List[str]:
    """Return the non-blank lines of ``path``, newline stripped.

    Bytes that are not valid UTF-8 are kept as lone surrogates.
    """
    with open(path, "r", encoding="utf-8", errors="surrogateescape") as f:
        return [line.rstrip("\r\n") for line in f if line.strip()]


def build_filter(words: List[str], false_positive_rate: float) -> BloomFilter:
    """Size a filter for ``words`` and insert all of them."""
    bloom = BloomFilter(len(words), false_positive_rate)
    bloom.update(_raw(word) for word in words)
    return bloom


def find_misspelled(bloom: BloomFilter, words: Iterable[str]) -> List[str]:
    """Words the filter has definitely never seen, in input order."""
    return [word for word in words if not bloom.possibly_contains(_raw(word))]


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bloomers", description="Spell checker using bloom filter"
    )
    p.add_argument("-f", "--file", help="dictionary file")
    p.add_argument(
        "-o",
        "--output",
        default=settings.filter_path,
        help="filter artifact to read or write (default: %(default)s)",
    )
    p.add_argument(
        "-r",
        "--rate",
        type=float,
        default=settings.false_positive_rate,
        help="target false positive rate (default: %(default)s)",
    )
    p.add_argument(
        "--rebuild",
        action="store_true",
        help="rebuild the artifact from the dictionary even if it exists",
    )
    p.add_argument("--inspect", action="store_true", help="print the filter summary")
    p.add_argument("words", nargs="*", help="words to check")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level)

    args = build_parser(settings).parse_args(argv)
    output = Path(args.output)

    try:
        if output.exists() and not args.rebuild:
            print(f"Reading file: {output}")
            bloom = open_filter(output)
        elif args.file is None:
            print("'file' must be specified")
            return 2
        else:
            words = read_dictionary(args.file)
            bloom = build_filter(words, args.rate)
            print(f"Writing file: {output}")
            save(bloom, output)
    except OSError as exc:
        print(f"Error: could not open file {exc.filename}", file=sys.stderr)
        return 1
    except BloomError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.inspect:
        print(bloom.inspect(full=False))

    spelled_wrong = find_misspelled(bloom, args.words)
    logger.info("spell_check_done", checked=len(args.words), misspelled=len(spelled_wrong))
    if spelled_wrong:
        print("These words are spelt wrong:")
        for word in spelled_wrong:
            print(f"  - {_raw(word).decode('utf-8', 'replace')}")
    else:
        print("All words spelt correctly")
    return 0


if __name__ == "__main__":
    sys.exit(main())
