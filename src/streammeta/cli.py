"""Command-line interface for streammeta."""

import asyncio
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import click
import uvicorn
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .core.config import StreamMetaConfig
from .core.logging import setup_logging
from .core.wiring import build_service, create_pool
from .storage.postgresql import PostgresSchemaStore, PostgresStatsLoader
from .streams.errors import StreamMetaError
from .streams.models import StreamDescriptor, StreamType
from .streams.service import StreamMetadataService

console = Console()

T = TypeVar("T")

STREAM_TYPES = [stream_type.value for stream_type in StreamType]

CONFIG_TEMPLATE = """# streammeta configuration

# Where stream data lives: disk or s3
storage:
  backend: disk

# PostgreSQL metadata store (schemas, compaction offsets, stats)
database:
  url: "postgresql://localhost:5432/streammeta"
  metadata_schema: "streammeta"
  min_pool_size: 1
  max_pool_size: 10

# HTTP API
api:
  host: "0.0.0.0"
  port: 5080
  prefix: "/api"

# Monitoring configuration
monitoring:
  prometheus:
    enabled: false
    port: 8080
    path: "/metrics"
  log_level: "INFO"
  structured_logging: true
"""


@click.group()
@click.version_option(version=__version__, prog_name="streammeta")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (environment only when omitted)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """streammeta: stream schema, settings and lifecycle metadata."""
    try:
        config = StreamMetaConfig.from_file(config_path) if config_path else StreamMetaConfig()
    except Exception as e:
        console.print(f"[red]✗ Configuration is invalid: {escape(str(e))}[/red]")
        sys.exit(1)

    setup_logging(config.monitoring, cli_mode=not verbose)
    ctx.obj = config


@cli.command()
@click.pass_obj
def validate(config: StreamMetaConfig):
    """Validate configuration file."""
    console.print("[green]✓ Configuration is valid[/green]")
    _display_config_summary(config)


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=Path("streammeta.yaml"),
    show_default=True,
    help="Where to write the configuration file",
)
def init(output: Path):
    """Write a starter configuration file."""
    if output.exists():
        console.print(f"[yellow]Configuration file already exists: {output}[/yellow]")
        if not click.confirm("Overwrite existing file?"):
            return

    output.write_text(CONFIG_TEMPLATE)
    console.print(f"[green]Created configuration file: {output}[/green]")


@cli.command("init-db")
@click.pass_obj
def init_db(config: StreamMetaConfig):
    """Create the metadata tables in PostgreSQL."""

    async def _init(service: StreamMetadataService) -> None:
        store = service.schema_store
        if isinstance(store, PostgresSchemaStore):
            await store.initialize()

    _run(config, _init, require_database=True, load_stats=False)
    console.print(
        f"[green]Metadata tables ready in schema {config.database.metadata_schema}[/green]"
    )


@cli.command()
@click.argument("org_id")
@click.argument("stream_name")
@click.option("--type", "stream_type", type=click.Choice(STREAM_TYPES), default="logs")
@click.pass_obj
def show(config: StreamMetaConfig, org_id: str, stream_name: str, stream_type: str):
    """Show schema, settings and statistics of a stream."""
    stream = _run(
        config,
        lambda service: service.get_stream(org_id, stream_name, StreamType(stream_type)),
    )
    _display_stream(stream)


@cli.command("list")
@click.argument("org_id")
@click.option("--type", "stream_type", type=click.Choice(STREAM_TYPES), default=None)
@click.pass_obj
def list_streams(config: StreamMetaConfig, org_id: str, stream_type: Optional[str]):
    """List the streams of an organization."""
    streams = _run(
        config,
        lambda service: service.list_streams(
            org_id, StreamType(stream_type) if stream_type else None
        ),
    )

    table = Table(title=f"Streams of {org_id}")
    table.add_column("Stream", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Storage", style="magenta")
    table.add_column("Docs", justify="right")
    table.add_column("Size (MiB)", justify="right")
    table.add_column("Compressed (MiB)", justify="right")

    for stream in streams:
        table.add_row(
            stream.name,
            str(stream.stream_type),
            str(stream.storage_type),
            str(stream.stats.doc_num),
            f"{stream.stats.storage_size:.2f}",
            f"{stream.stats.compressed_size:.2f}",
        )

    console.print(table)


@cli.command()
@click.argument("org_id")
@click.argument("stream_name")
@click.option("--type", "stream_type", type=click.Choice(STREAM_TYPES), default="logs")
@click.confirmation_option(prompt="Delete the stream and all of its metadata?")
@click.pass_obj
def delete(config: StreamMetaConfig, org_id: str, stream_name: str, stream_type: str):
    """Delete a stream: schema, cached metadata and compaction offset."""
    result = _run(
        config,
        lambda service: service.delete_stream(org_id, stream_name, StreamType(stream_type)),
        require_database=True,
    )
    stages = ", ".join(stage.value for stage in result.completed)
    console.print(f"[green]Stream {stream_name} deleted[/green] ({stages})")


@cli.command()
@click.option("--host", default=None, help="Host to bind to (overrides config)")
@click.option("--port", default=None, type=int, help="Port to bind to (overrides config)")
@click.pass_obj
def serve(config: StreamMetaConfig, host: Optional[str], port: Optional[int]):
    """Start the streammeta API server."""
    from .api.main import create_app

    uvicorn.run(
        create_app(config),
        host=host or config.api.host,
        port=port or config.api.port,
        log_level=config.monitoring.log_level.lower(),
    )


def _run(
    config: StreamMetaConfig,
    operation: Callable[[StreamMetadataService], Awaitable[T]],
    require_database: bool = False,
    load_stats: bool = True,
) -> T:
    """Run ``operation`` against a service wired from ``config``.

    Stats are loaded from PostgreSQL first unless ``load_stats`` is False.
    """

    async def _execute() -> T:
        if not config.database.url:
            if require_database:
                raise click.UsageError("database.url must be configured for this command")
            return await operation(build_service(config))

        pool = await create_pool(config)
        try:
            service = build_service(config, pool)
            if load_stats:
                await PostgresStatsLoader(pool, config.database.metadata_schema).load(
                    service.stats_cache
                )
            return await operation(service)
        finally:
            await pool.close()

    try:
        return asyncio.run(_execute())
    except click.UsageError:
        raise
    except StreamMetaError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Failed: {escape(str(e))}[/red]")
        sys.exit(1)


def _display_stream(stream: StreamDescriptor):
    """Display a stream descriptor."""
    table = Table(title=f"Stream {stream.name}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Type", str(stream.stream_type))
    table.add_row("Storage", str(stream.storage_type))
    table.add_row("Partition Keys", ", ".join(stream.settings.partition_keys) or "-")
    table.add_row("Full Text Search", ", ".join(stream.settings.full_text_search_keys) or "-")
    table.add_row("Skip Validation", "Yes" if stream.settings.skip_schema_validation else "No")
    table.add_row("Data Retention", str(stream.settings.data_retention))
    table.add_row("Documents", str(stream.stats.doc_num))
    table.add_row("Storage Size (MiB)", f"{stream.stats.storage_size:.2f}")
    table.add_row("Compressed Size (MiB)", f"{stream.stats.compressed_size:.2f}")
    console.print(table)

    schema_table = Table(title="Schema")
    schema_table.add_column("Field", style="cyan")
    schema_table.add_column("Type", style="green")
    for prop in stream.schema_:
        schema_table.add_row(prop.name, prop.type)
    console.print(schema_table)


def _display_config_summary(config: StreamMetaConfig):
    """Display a summary of the configuration."""
    table = Table(title="Configuration Summary")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Storage Backend", config.storage.backend)
    table.add_row("Metadata Store", "PostgreSQL" if config.database.url else "In-memory")
    table.add_row("Metadata Schema", config.database.metadata_schema)
    table.add_row("API", f"{config.api.host}:{config.api.port}{config.api.prefix}")
    table.add_row(
        "Prometheus", "Enabled" if config.monitoring.prometheus.enabled else "Disabled"
    )
    table.add_row("Log Level", config.monitoring.log_level)

    console.print(table)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
