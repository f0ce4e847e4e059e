"""CLI argument parser."""

from __future__ import annotations

import argparse

from .. import __version__
from ..search.base import ProviderId


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Returns:
        ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="llm-search",
        description="llm-search-kit - multi-provider web search with fallback and caching",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search with the default provider (DuckDuckGo, falling back to Google)
  llm-search search "typescript programming" -n 5

  # Force a provider and print JSON
  llm-search search "rust async" -p google --json

  # Show the provider registry
  llm-search providers

  # Generate a default config
  llm-search init -o llm-search.yaml
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s v{__version__}",
        help="Show program's version number and exit",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Search command
    search_parser = subparsers.add_parser("search", help="Run a search")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument(
        "-p",
        "--provider",
        choices=[pid.value for pid in ProviderId],
        help="Provider to use (default: configured default with fallback)",
    )
    search_parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=None,
        help="Maximum number of results (default: from config, 10)",
    )
    search_parser.add_argument(
        "--no-safe-search",
        dest="safe_search",
        action="store_false",
        default=None,
        help="Disable safe search",
    )
    search_parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Call timeout in milliseconds (default: from config, 10000)",
    )
    search_parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    search_parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to a YAML/JSON configuration file",
    )

    # Providers command
    providers_parser = subparsers.add_parser("providers", help="List search providers")
    providers_parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to a YAML/JSON configuration file",
    )

    # Init command
    init_parser = subparsers.add_parser("init", help="Generate default configuration")
    init_parser.add_argument(
        "-o",
        "--output",
        default="llm-search.yaml",
        help="Output config file path (default: llm-search.yaml)",
    )
    init_parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite an existing file without asking",
    )

    return parser
