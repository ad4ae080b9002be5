"""
CLI Main - Typer-based command-line interface.

Usage:
    sphinxbridge translate "badgers" --filter views__gte=7 --order views:desc
    sphinxbridge translate "badgers" --page 2 --per-page 10 --facet popular=views__gt=10
    sphinxbridge version
"""

from __future__ import annotations

import logging
from typing import Any

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from sphinxbridge.adapters.sqlite import SQLiteConnection, SQLiteIndex
from sphinxbridge.config import SphinxBridgeError, get_settings
from sphinxbridge.domains.search import (
    Comparison,
    FilterTranslator,
    PaginationDefaults,
    PaginationResolver,
    TranslatedQuery,
)

app = typer.Typer(
    name="sphinxbridge",
    help="SphinxBridge - Query translation for realtime search indexes",
    add_completion=False,
)
console = Console()


def _parse_value(raw: str) -> Any:
    """Parse a command-line value: ints, floats, comma-separated lists, else text."""
    if "," in raw:
        return [_parse_value(part) for part in raw.split(",") if part]
    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            continue
    return raw


def _parse_pairs(pairs: list[str], option: str) -> dict[str, str]:
    parsed = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            console.print(f"[red]Error:[/red] {option} expects key=value, got {pair!r}")
            raise typer.Exit(1)
        parsed[key] = value
    return parsed


def _parse_order(entries: list[str]) -> list[tuple[str, str | None]]:
    order = []
    for entry in entries:
        attr, _, direction = entry.partition(":")
        order.append((attr, direction or None))
    return order


def _render(value: Any) -> str:
    if isinstance(value, Comparison):
        return str(value)
    if isinstance(value, list) and value and isinstance(value[0], tuple):
        return ", ".join(f"{attr} {direction.value.upper()}" for attr, direction in value)
    return repr(value)


def _add_facets(tree: Tree, facets: dict[str, TranslatedQuery]) -> None:
    for name, (query, options) in facets.items():
        branch = tree.add(f"[cyan]{name}[/cyan] query={query!r}")
        for key, value in options.items():
            if key == "facets":
                _add_facets(branch, value)
            else:
                branch.add(f"{key}: {_render(value)}")


@app.command()
def translate(
    query: str = typer.Argument("", help="Fulltext query"),
    filters: list[str] = typer.Option([], "--filter", "-f", help="Filter attr[__op]=value"),
    order: list[str] = typer.Option([], "--order", "-o", help="Order attr[:asc|desc]"),
    facets: list[str] = typer.Option([], "--facet", help="Facet name=attr[__op]=value"),
    page: int | None = typer.Option(None, "--page", "-p", help="Page number"),
    per_page: int | None = typer.Option(None, "--per-page", help="Page size"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Explicit limit"),
    offset: int | None = typer.Option(None, "--offset", help="Explicit offset"),
    index: str = typer.Option("index", "--index", "-i", help="Index name"),
) -> None:
    """Show a search as the transport would receive it."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")

    options: dict[str, Any] = {k: _parse_value(v) for k, v in _parse_pairs(filters, "--filter").items()}
    if order:
        options["order"] = _parse_order(order)
    if facets:
        options["facets"] = {
            name: {key: _parse_value(value) for key, value in _parse_pairs([spec], "--facet").items()}
            for name, spec in _parse_pairs(facets, "--facet").items()
        }
    if page is not None:
        options["pager"] = {"page": page, "per_page": per_page}
    if limit is not None:
        options["limit"] = limit
    if offset is not None:
        options["offset"] = offset

    # Translation only needs the transport's argument handling; nothing is opened.
    transport = SQLiteIndex(SQLiteConnection(":memory:"), index, fields=(), attributes={})
    defaults = (
        PaginationDefaults(per_page=settings.default_per_page, page_param=settings.default_page_param)
        if settings.pagination_enabled
        else None
    )

    try:
        pagination = PaginationResolver(defaults)
        translated = FilterTranslator(transport, pagination).translate((query,), options)
        pager = pagination.resolve(translated.options)
    except SphinxBridgeError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    table = Table(title=f"Search on {index}")
    table.add_column("Option", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("query", repr(translated.fulltext))
    for key, value in translated.options.items():
        if key != "facets":
            table.add_row(key, _render(value))
    if pager is not None:
        table.add_row("pager", f"page {pager.page} ({pager.page_param}), {pager.per_page} per page")
    console.print(table)

    if "facets" in translated.options:
        tree = Tree("[bold]Facets[/bold]")
        _add_facets(tree, translated.options["facets"])
        console.print(tree)


@app.command()
def version() -> None:
    """Show version information."""
    from sphinxbridge import __version__

    console.print(f"SphinxBridge v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
