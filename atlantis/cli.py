"""Command-line entry point for atlantis."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from atlantis import bootstrap

VERSION = "0.2.4"


def _run_version(args: argparse.Namespace) -> int:
    print(f"atlantis {VERSION}")
    return 0


def _run_bootstrap(args: argparse.Namespace) -> int:
    try:
        bootstrap.start()
    except Exception as exc:
        print(f"\033[31mError: {exc}\033[39m\n", file=sys.stderr)
        return 1
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atlantis",
        description="A unified workflow for collaborating on Terraform through GitHub and GitLab",
    )
    commands = parser.add_subparsers(dest="command", metavar="command")
    version = commands.add_parser("version", help="Print the current Atlantis version")
    version.set_defaults(handler=_run_version)
    guided = commands.add_parser("bootstrap", help="Start a guided tour of Atlantis")
    guided.set_defaults(handler=_run_bootstrap)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the atlantis command line and return its exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())