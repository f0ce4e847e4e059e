"""CLI command handlers: search, providers, init."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..core import get_logger, setup_logging
from ..search.config import SearchConfig
from ..search.exceptions import SearchError
from ..search.manager import SearchManager
from ..search.registry import ProviderRegistry

logger = get_logger("cli")

console = Console()


def _load_config(args: argparse.Namespace) -> SearchConfig | None:
    """Load the configuration named on the command line (or the environment)."""
    try:
        config = SearchConfig.load(args.config)
    except (FileNotFoundError, ValueError, ValidationError) as exc:
        console.print(f"[red]Error loading configuration:[/] {exc}")
        return None

    if getattr(args, "debug", False):
        config.logging.level = "DEBUG"
    setup_logging(config.logging)
    return config


def cmd_search(args: argparse.Namespace) -> int:
    """Handle search command.

    Args:
        args: Parsed arguments

    Returns:
        Exit code
    """
    config = _load_config(args)
    if config is None:
        return 1

    options: dict[str, Any] = {
        "provider": args.provider,
        "limit": args.limit,
        "safe_search": args.safe_search,
        "timeout": args.timeout,
    }

    try:
        manager = SearchManager.from_config(config)
        results = asyncio.run(manager.search(args.query, options))
    except SearchError as exc:
        logger.debug("Search failed", exc_info=True)
        if args.json:
            print(json.dumps({"error": exc.to_dict()}, indent=2, ensure_ascii=False))
        else:
            console.print(f"[red]Search failed ({exc.code.value}):[/] {exc.message}")
        return 1

    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
        return 0

    if not results:
        console.print(f"[yellow]No results for:[/] {args.query}")
        return 0

    table = Table(title=f"Results for: {args.query}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("URL", style="cyan")
    table.add_column("Source", style="green")
    for index, result in enumerate(results, 1):
        table.add_row(str(index), result.title, result.url, result.source.value)
    console.print(table)
    return 0


def cmd_providers(args: argparse.Namespace) -> int:
    """Handle providers command.

    Args:
        args: Parsed arguments

    Returns:
        Exit code
    """
    config = _load_config(args)
    if config is None:
        return 1

    try:
        registry = ProviderRegistry(
            default_provider=config.default_provider,
            enable_experimental=config.enable_experimental,
        )
    except SearchError as exc:
        console.print(f"[red]Invalid provider configuration:[/] {exc.message}")
        return 1

    table = Table(title="Search providers")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Enabled")
    table.add_column("Experimental")
    table.add_column("Fallback")
    table.add_column("Min interval (s)", justify="right")
    for provider_id, provider_config in registry:
        settings = config.provider(provider_id)
        fallback = config.fallback_chain.get(provider_id)
        marker = " (default)" if provider_id == registry.default_provider else ""
        table.add_row(
            provider_id.value + marker,
            provider_config.name,
            "[green]yes[/]" if provider_config.enabled else "[red]no[/]",
            "yes" if provider_config.experimental else "no",
            fallback.value if fallback and config.enable_failover else "-",
            f"{settings.min_interval_seconds:g}",
        )
    console.print(table)
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Handle init command.

    Args:
        args: Parsed arguments

    Returns:
        Exit code
    """
    output_path = Path(args.output)

    if output_path.exists() and not args.force:
        response = input(f"{output_path} already exists. Overwrite? (y/N): ")
        if response.lower() != "y":
            print("Cancelled.")
            return 0

    SearchConfig.defaults().to_yaml(output_path)

    print(f"✓ Configuration file created: {output_path}")
    print("\nNext steps:")
    print(f"1. Edit {output_path} (API keys, intervals, fallback chain)")
    print(f'2. Run a search: llm-search search "hello world" -c {output_path}')

    return 0
