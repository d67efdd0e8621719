# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""mcp-playwright CLI.

Usage:
    mcp-playwright [serve] [--log-level LEVEL] [--json-logs] [--no-auto-install] [--install-timeout SECONDS]
    python -m mcp_playwright.cli serve

``serve`` is the only command and is assumed when none is given.
"""

from __future__ import annotations

import argparse
import sys


def _get_server_options_help() -> str:
    """Server option help text, without the usage line and -h entry."""
    from .config import build_server_parser

    raw = build_server_parser().format_help()
    lines = raw.splitlines()
    start = None
    for i, line in enumerate(lines):
        if line.rstrip() in ("options:", "optional arguments:"):
            start = i + 1
            break
    if start is None:
        return raw
    return "\n".join(line for line in lines[start:] if not line.lstrip().startswith("-h, --help")).strip("\n")


class _ServeHelpAction(argparse.Action):
    """Help for 'serve' that appends the forwarded server options."""

    def __init__(self, option_strings, dest=argparse.SUPPRESS, default=argparse.SUPPRESS, help=None):
        super().__init__(option_strings=option_strings, dest=dest, default=default, nargs=0, help=help)

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_help()
        print(f"\nforwarded server options:\n{_get_server_options_help()}")
        parser.exit()


def cmd_serve(args: argparse.Namespace) -> int:
    """Start MCP server, forwarding any extra args to the server."""
    from .server import main

    return main(argv=getattr(args, "_server_argv", []))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-playwright",
        description="MCP Playwright Server - Playwright automation via Model Context Protocol",
    )
    parser.add_argument("--version", action="store_true", help="Print the version and exit")
    subparsers = parser.add_subparsers(dest="command")

    p_serve = subparsers.add_parser(
        "serve",
        help="Start the MCP server (extra args forwarded to server)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  %(prog)s                       Start with stdio transport
  %(prog)s --json-logs           JSON log lines on stderr
  %(prog)s --no-auto-install     Fail instead of downloading missing browsers""",
        add_help=False,
    )
    p_serve.add_argument(
        "-h",
        "--help",
        action=_ServeHelpAction,
        default=argparse.SUPPRESS,
        help="show this help message and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    raw = list(sys.argv[1:] if argv is None else argv)
    # Bare server flags (no subcommand) still mean "serve"
    if not raw or (raw[0].startswith("-") and raw[0] not in ("-h", "--help", "--version")):
        raw.insert(0, "serve")
    args, remaining = parser.parse_known_args(raw)

    if args.version:
        from .server import SERVER_VERSION

        print(SERVER_VERSION)
        sys.exit(0)

    if args.command == "serve":
        args._server_argv = remaining
    elif remaining:
        parser.error(f"unrecognized arguments: {' '.join(remaining)}")

    commands = {"serve": cmd_serve}
    try:
        code = commands[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    main()
