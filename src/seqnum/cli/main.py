"""seqnum CLI entry point."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from seqnum.core.config import (
    DEFAULT_CONFIG_FILE,
    load_numbering_config,
    make_sequence_configs,
    make_settings,
)
from seqnum.core.errors import NumberingError
from seqnum.store.json_file import JsonCounterStore

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Numbering config file.",
)
_store_option = click.option(
    "--store",
    "store_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Counter file (overrides settings.store_path).",
)


def _open_store(config_path: Path, store_path: Path | None) -> tuple[dict, JsonCounterStore]:
    data = load_numbering_config(config_path)
    settings = make_settings(data)
    path = store_path or Path(settings.store_path)
    return data, JsonCounterStore(path, max_retries=settings.max_retries)


def _parse_fields(pairs: tuple[str, ...]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {pair!r}", param_hint="--field")
        fields[name] = value
    return fields


@click.group()
@click.version_option(package_name="seqnum")
@click.option("--json-logs", is_flag=True, default=False, help="Output logs as JSON.")
@click.option("--log-level", default="WARNING", show_default=True, help="Log level.")
@click.option(
    "--metrics-port",
    type=int,
    default=0,
    help="Prometheus metrics port (0=disabled).",
)
def cli(json_logs: bool, log_level: str, metrics_port: int) -> None:
    """seqnum: sequential, pattern-based numbers from the command line."""
    from seqnum.core.logging import configure_logging

    configure_logging(json_output=json_logs, level=log_level)

    if metrics_port > 0:
        from seqnum.metrics.server import start_metrics_server

        start_metrics_server(metrics_port)


@cli.command("next")
@click.argument("name")
@click.option(
    "--field",
    "field_pairs",
    multiple=True,
    metavar="NAME=VALUE",
    help="Record field used to resolve the segment expression.",
)
@click.option("--count", type=click.IntRange(min=1), default=1, show_default=True)
@_config_option
@_store_option
def next_number(
    name: str,
    field_pairs: tuple[str, ...],
    count: int,
    config_path: Path,
    store_path: Path | None,
) -> None:
    """Generate the next COUNT numbers of sequence NAME."""
    from seqnum.core.batch import Batch
    from seqnum.core.generator import NumberGenerator

    try:
        data, store = _open_store(config_path, store_path)
        sequences = make_sequence_configs(data)
        if name not in sequences:
            known = ", ".join(sorted(sequences)) or "none"
            raise click.ClickException(f"Unknown sequence '{name}' (configured: {known})")

        config = sequences[name]
        record = _parse_fields(field_pairs)
        generator = NumberGenerator(store)

        async def _run() -> list[str]:
            batch = Batch()
            return [await generator.generate_for(config, record, batch) for _ in range(count)]

        numbers = asyncio.run(_run())
    except NumberingError as e:
        raise click.ClickException(str(e)) from e

    for number in numbers:
        click.echo(number)


@cli.command()
@click.argument("pattern")
@click.option("--value", type=int, default=1, show_default=True, help="Counter value.")
def preview(pattern: str, value: int) -> None:
    """Render PATTERN with VALUE without touching any counter."""
    from seqnum.core.clock import utc_now
    from seqnum.tokens.registry import default_registry
    from seqnum.tokens.token import tokenize

    registry = default_registry()
    tokens = tokenize(pattern, utc_now())
    click.echo(registry.render(tokens, pattern, value))


@cli.command()
@click.argument("key", required=False)
@_config_option
@_store_option
def show(key: str | None, config_path: Path, store_path: Path | None) -> None:
    """List stored counters, optionally only those of KEY."""
    try:
        _, store = _open_store(config_path, store_path)
        counters = asyncio.run(store.list_counters(key))
    except NumberingError as e:
        raise click.ClickException(str(e)) from e

    if not counters:
        click.echo("No counters stored.")
        return

    for counter in counters:
        segment = counter.segment if counter.segment is not None else "-"
        click.echo(
            f"{counter.key:<16} {segment:<16} {counter.current_value:>8}  "
            f"{counter.last_advanced_at.isoformat()}  {counter.pattern}"
        )
