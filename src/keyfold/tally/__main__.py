"""CLI entry point for per-key tallies.

Usage:
    python -m keyfold.tally sales.csv --key store --sum total
"""

import argparse
import logging
import sys

from pydantic import ValidationError

from keyfold.grouping import IntegerPolicy
from keyfold.tally import TallyOptions, format_tally, load_records, tally


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Count, sum or maximise a field of CSV / JSON-lines records per key.",
        prog="python -m keyfold.tally",
    )
    parser.add_argument("path", help="Input file, or - for standard input")
    parser.add_argument(
        "--format",
        choices=["csv", "jsonl"],
        default=None,
        help="Input format (default: from the file extension)",
    )
    parser.add_argument("-k", "--key", required=True, help="Field to group records by")

    measure = parser.add_mutually_exclusive_group()
    measure.add_argument("--count", action="store_true", help="Count records per key (default)")
    measure.add_argument("--sum", metavar="FIELD", help="Sum an integer field per key")
    measure.add_argument("--max", metavar="FIELD", help="Greatest numeric value of a field per key")

    parser.add_argument(
        "--overflow",
        choices=["unbounded", "wrap", "trap"],
        default="unbounded",
        help="Integer overflow handling for --count and --sum (default: unbounded)",
    )
    parser.add_argument(
        "--bits",
        type=int,
        default=64,
        help="Integer width for --overflow wrap/trap (default: 64)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = TallyOptions(
            key=args.key,
            measure="sum" if args.sum else "max" if args.max else "count",
            field=args.sum or args.max,
            policy=IntegerPolicy(overflow=args.overflow, bits=args.bits),
        )
    except ValidationError as e:
        print(f"Error: invalid options: {e}", file=sys.stderr)
        return 2

    try:
        result = tally(load_records(args.path, args.format), options)
        sys.stdout.write(format_tally(result))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
