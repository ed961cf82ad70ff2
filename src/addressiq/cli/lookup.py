"""
CLI: ``addressiq lookup`` and ``addressiq sources``.

``lookup`` runs one aggregation in-process, exactly as the API would, and
prints either a summary or the full composite record as JSON. ``sources``
shows which upstream sources the current configuration enables.
"""

from __future__ import annotations

import asyncio

import typer
from rich.table import Table

from addressiq.adapters.registry import FAN_OUT
from addressiq.cli.utils import console, fail, print_json, print_pairs
from addressiq.core.cache import build_result_cache
from addressiq.core.errors import AddressIQError, AddressNotFoundError
from addressiq.core.logging import configure_logging
from addressiq.core.settings import Settings
from addressiq.engine import Aggregator
from addressiq.models.address import AddressKey
from addressiq.models.composite import CompositeRecord
from addressiq.transport.client import HttpClient


async def run_lookup(settings: Settings, key: AddressKey, *, use_cache: bool) -> CompositeRecord:
    cache = build_result_cache(settings) if use_cache else None
    async with HttpClient(timeout=settings.http_timeout_seconds) as http:
        aggregator = Aggregator(http, settings, cache=cache)
        return await aggregator.aggregate(key)


def lookup(
    postcode: str = typer.Argument(..., help="Dutch postcode, e.g. 3541ED"),
    house_number: str = typer.Argument(..., help="House number, e.g. 53"),
    json_out: bool = typer.Option(False, "--json", help="Print the full composite record as JSON"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Do not read or write the result cache"),
) -> None:
    """Aggregate everything known about one address."""
    settings = Settings()
    configure_logging(level="error" if json_out else settings.log_level, json_format=False)

    key = AddressKey.of(postcode, house_number)
    if not key.postcode or not key.house_number:
        fail("postcode and house number are required", "INVALID_INPUT")
        raise typer.Exit(code=2)

    try:
        record = asyncio.run(run_lookup(settings, key, use_cache=not no_cache))
    except AddressNotFoundError as e:
        fail(e.message, "NOT_FOUND")
        raise typer.Exit(code=1) from e
    except AddressIQError as e:
        fail(e.message, e.category.value)
        raise typer.Exit(code=1) from e

    if json_out:
        print_json(record.to_json())
        return

    address = record.address
    pairs: list[tuple[str, object]] = [
        ("Address", address.display_name),
        ("Coordinates", f"{address.latitude:.6f}, {address.longitude:.6f}"),
        ("BAG ID", address.bag_id),
        ("Neighbourhood", record.region.neighbourhood_name or "-"),
        ("Sources", f"{len(record.sources)} succeeded, {len(record.errors)} failed"),
        ("Cached", "yes" if record.cached else "no"),
    ]
    if record.scores is not None:
        scores = record.scores
        pairs += [
            ("Overall score", f"{scores.overall_score:.1f}"),
            ("ESG score", f"{scores.esg_score:.1f}"),
            ("Profit score", f"{scores.profit_score:.1f}"),
            ("Opportunity score", f"{scores.opportunity_score:.1f}"),
            ("Risk level", scores.risk_level),
        ]
    print_pairs(pairs, title=str(key))

    if record.errors:
        table = Table(title="Errors")
        table.add_column("Source", style="bold")
        table.add_column("Error", style="red")
        for source, message in record.errors.items():
            table.add_row(source, message)
        console.print(table)

    if record.scores is not None and record.scores.recommendations:
        console.print("[bold]Recommendations[/bold]")
        for advice in record.scores.recommendations:
            console.print(f"  • {advice}")


def sources(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List every upstream source and whether the current configuration enables it."""
    settings = Settings()
    rows = [
        {
            "name": spec.name,
            "label": spec.label,
            "category": spec.category,
            "input": spec.needs.value,
            "enabled": spec.is_configured(settings),
        }
        for spec in FAN_OUT
    ]

    if json_out:
        print_json(rows)
        return

    table = Table(title="Sources")
    for column in ("Name", "Provider", "Category", "Input", "Enabled"):
        table.add_column(column)
    for row in rows:
        enabled = "[green]yes[/green]" if row["enabled"] else "[dim]no[/dim]"
        table.add_row(row["name"], row["label"], row["category"], row["input"], enabled)
    console.print(table)
    console.print(f"[dim]{sum(r['enabled'] for r in rows)} of {len(rows)} sources enabled[/dim]")
