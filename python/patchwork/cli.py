import argparse
import codecs
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List

import structlog
from pydantic import ValidationError

from patchwork import __version__
from patchwork.edits import load_edits, register_edits
from patchwork.errors import PatchError
from patchwork.merge import describe_patches, merge_patches
from patchwork.patcher import Patcher

LOG_LEVEL_ENV = "PATCHWORK_LOG_LEVEL"


def configure_logging(verbose: bool = False):
    """
    Routes all logs to stderr; stdout carries the rewritten text.
    The level comes from PATCHWORK_LOG_LEVEL unless --verbose forces DEBUG.
    """
    level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING

    logging.basicConfig(stream=sys.stderr, level=level, force=True)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _parse_vars(pairs: List[str]) -> Dict[str, str]:
    context = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Expected NAME=VALUE, got '{pair}'")
        context[name] = value
    return context


def _build_patcher(args: argparse.Namespace) -> Patcher:
    if not args.source.exists():
        print(f"Error: File not found: {args.source}", file=sys.stderr)
        sys.exit(1)
    if not args.edits.exists():
        print(f"Error: Edits file not found: {args.edits}", file=sys.stderr)
        sys.exit(1)

    with open(args.source, "r", encoding="utf-8", newline="") as f:
        patcher = Patcher(f.read())

    try:
        register_edits(patcher, load_edits(args.edits))
    except (ValidationError, ValueError, PatchError) as e:
        print(f"Error loading edits from {args.edits}: {e}", file=sys.stderr)
        sys.exit(1)
    return patcher


def handle_apply(args: argparse.Namespace):
    patcher = _build_patcher(args)
    try:
        context = _parse_vars(args.var)
        codecs.lookup(args.encoding)
    except LookupError:
        print(f"Error: Unknown encoding: {args.encoding}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        # Overlaps must surface before the output file is opened and truncated
        merge_patches(patcher.workspace.patches)
        if args.output:
            if args.stream:
                with open(args.output, "wb") as f:
                    patcher.render_to_sink(f, context, encoding=args.encoding)
            else:
                result = patcher.render_to_string(context)
                with open(args.output, "w", encoding=args.encoding, newline="") as f:
                    f.write(result)
            print(f"✅ Saved to {args.output}", file=sys.stderr)
        elif args.stream:
            patcher.render_to_sink(sys.stdout.buffer, context, encoding=args.encoding)
            sys.stdout.buffer.flush()
        else:
            sys.stdout.write(patcher.render_to_string(context))
    except (PatchError, LookupError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def handle_plan(args: argparse.Namespace):
    """Prints the patches that survive merging, in emission order."""
    patcher = _build_patcher(args)
    try:
        merged = merge_patches(patcher.workspace.patches)
    except PatchError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for line in describe_patches(merged):
        print(line)
    dropped = len(patcher.workspace.patches) - len(merged)
    print(f"Stats: {len(merged)} applied, {dropped} contained.", file=sys.stderr)


def main(argv=None):
    parser = argparse.ArgumentParser(prog="patchwork", description="Patchwork: positional text rewriting")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Subcommands")

    p_apply = subparsers.add_parser("apply", help="Apply a JSON edit file to a text file")
    p_apply.add_argument("source", type=Path, help="Original text file")
    p_apply.add_argument("edits", type=Path, help="JSON file containing edits")
    p_apply.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    p_apply.add_argument("--stream", action="store_true", help="Write chunks as they are produced")
    p_apply.add_argument("--encoding", default="utf-8", help="Output encoding (default: utf-8)")
    p_apply.add_argument(
        "--var",
        action="append",
        metavar="NAME=VALUE",
        help="Context value available to template edits (repeatable)",
    )
    p_apply.set_defaults(func=handle_apply)

    p_plan = subparsers.add_parser("plan", help="Show which edits survive merging")
    p_plan.add_argument("source", type=Path, help="Original text file")
    p_plan.add_argument("edits", type=Path, help="JSON file containing edits")
    p_plan.set_defaults(func=handle_plan)

    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
