"""Main CLI entry point for velofit."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .. import __version__
from ..cli.inspect import inspect_file
from ..exceptions import VelofitError


def main() -> int:
    """Main entry point for the velofit CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        description="velofit: FIT activity codec for indoor cycling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  velofit --inspect ride.fit            Summarize a FIT activity file
  velofit --version                     Show version
        """,
    )

    parser.add_argument(
        "--inspect",
        metavar="FILE",
        type=str,
        help="Decode a FIT file and print its messages and session summary",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"velofit {__version__}",
    )

    args = parser.parse_args()

    # Handle --inspect
    if args.inspect:
        file_path = Path(args.inspect)
        if not file_path.exists():
            print(f"Error: File not found: {file_path}", file=sys.stderr)
            return 1

        try:
            inspect_file(file_path)
            return 0
        except (OSError, VelofitError) as e:
            print(f"Error inspecting file: {e}", file=sys.stderr)
            return 1

    # If no command specified, show help
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
