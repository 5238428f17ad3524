"""
Command-line entry point.

Builds the argparse parser from the subcommand modules, runs the chosen
command, and turns fatal errors into a message and exit code 1.
"""

import argparse
import sys
from typing import List, Optional

from .api.exceptions import ImagemageError
from .commands import COMMAND_MODULES
from .config import APP_NAME, APP_VERSION
from .logging_utils import get_log_file_path, log_error, log_info, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Generate and edit images with Google Gemini image models.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log request and response details (API key redacted). Same as DEBUG=1",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    for module in COMMAND_MODULES:
        module.register(subparsers)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run imagemage with argv (defaults to sys.argv[1:]).

    Returns:
        0 if the command produced at least one image, 1 on failure,
        2 on usage errors (argparse exits directly).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug or None)
    log_info(f"Command: {args.command}")

    try:
        return args.func(args)
    except ImagemageError as e:
        log_error(f"{args.command} failed", str(e))
        print(f"Error: {e}", file=sys.stderr)
        log_file = get_log_file_path()
        if log_file is not None:
            print(f"See {log_file} for details.", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        log_info("Interrupted by user.")
        print("\nInterrupted.", file=sys.stderr)
        return 130
