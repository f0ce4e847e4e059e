"""Command-line interface for llm-search-kit."""

from __future__ import annotations

from collections.abc import Sequence

from .commands import cmd_init, cmd_providers, cmd_search
from .parser import build_parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Optional sequence of CLI arguments (without the program name).

    Returns:
        Process exit code. 0 for success.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        raise SystemExit(0)

    handlers = {
        "search": cmd_search,
        "providers": cmd_providers,
        "init": cmd_init,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


__all__ = [
    "build_parser",
    "cmd_init",
    "cmd_providers",
    "cmd_search",
    "main",
]
