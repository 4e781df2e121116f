"""CLI entrypoint for the crossword filler."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from crossfill.core.constants import EngineChoice
from crossfill.core.exceptions import CrosswordError, MalformedInputError
from crossfill.data.normalization import DEFAULT_WORDS
from crossfill.engine.filler import CrosswordFiller, FillerConfig, FillResult
from crossfill.io.pattern import read_pattern_file, read_words_file
from crossfill.utils.logger import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fill a crossword skeleton with words from a list",
    )
    parser.add_argument(
        "--pattern",
        type=Path,
        required=True,
        metavar="FILE",
        help="Grid pattern file ('1' or '.' open, '0' or '#' blocked, A-Z pre-filled)",
    )
    parser.add_argument(
        "--words",
        nargs="+",
        metavar="WORD",
        help="Candidate words",
    )
    parser.add_argument(
        "--words-file",
        type=Path,
        metavar="FILE",
        help="File with one word per line (# comments and blank lines ignored)",
    )
    parser.add_argument(
        "--engine",
        type=str,
        choices=[e.value for e in EngineChoice],
        default=None,
        help="Solving engine (default: $CROSSFILL_ENGINE or auto)",
    )
    parser.add_argument("--timeout", type=float, help="Time limit in seconds for each engine")
    parser.add_argument("--max-nodes", type=int, help="Node budget for the native search")
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def build_payload(result: FillResult) -> Dict[str, Any]:
    grid = result.grid
    return {
        "status": result.status.value,
        "engine": result.engine,
        "slots": [
            {
                "id": slot.id,
                "start": [slot.row, slot.col],
                "direction": slot.direction.value,
                "length": slot.length,
                "word": result.mapping.get(slot.id),
            }
            for slot in result.slots
        ],
        "grid": grid.to_strings() if grid is not None else None,
        "messages": result.messages,
    }


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    config = FillerConfig.from_env()
    if args.engine:
        config.engine = EngineChoice(args.engine)
    if args.timeout is not None:
        config.timeout_seconds = args.timeout
        config.native_time_limit = args.timeout
    if args.max_nodes is not None:
        config.max_nodes = args.max_nodes

    try:
        grid = read_pattern_file(args.pattern)
    except MalformedInputError as exc:
        parser.error(str(exc))

    words: List[str] = []
    if args.words:
        words.extend(args.words)
    if args.words_file:
        try:
            words.extend(read_words_file(args.words_file))
        except MalformedInputError as exc:
            parser.error(str(exc))
    if not args.words and not args.words_file:
        words = list(DEFAULT_WORDS)

    try:
        result = CrosswordFiller(config).fill(grid, words)
    except CrosswordError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    output_text = json.dumps(build_payload(result), ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    else:
        print(output_text)
    return 0 if result.solved else 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
