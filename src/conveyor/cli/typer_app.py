"""
Conveyor Typer CLI Application

Command-line front end for running the producer/consumer pipeline with
synthetic items and reporting the outcome.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from conveyor.config import Settings
from conveyor.core.pipeline.domain import (
    Coordinator,
    RunResult,
    StatisticsAggregator,
    split_items,
)
from conveyor.shared.constants import CLIDefaults, Pipeline, WorkDelay
from conveyor.shared.errors import (
    ApplicationError,
    ConveyorError,
    LivenessTimeoutError,
    PipelineConfigurationError,
)
from conveyor.shared.logging import setup_structured_logger

logger = logging.getLogger(__name__)

console = Console()


class LogLevel(str, Enum):
    """Log level enumeration for type safety."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


app = typer.Typer(
    name=CLIDefaults.APP_NAME,
    help="Run a bounded producer/consumer pipeline and report the outcome.",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(f"{CLIDefaults.APP_NAME} {CLIDefaults.VERSION}")
        raise typer.Exit


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version information and exit.",
        ),
    ] = False,
) -> None:
    """Conveyor command-line interface."""


def _load_settings(config: Path | None) -> Settings:
    if config is not None:
        return Settings.from_toml_file(config)
    return Settings()


def _apply_overrides(  # pylint: disable=too-many-arguments
    settings: Settings,
    *,
    producers: int | None,
    consumers: int | None,
    capacity: int | None,
    min_delay: float | None,
    max_delay: float | None,
) -> Settings:
    """Return settings with the command-line values layered on top."""
    workers = settings.workers.model_dump()
    channel = settings.channel.model_dump()
    if producers is not None:
        workers["num_producers"] = producers
    if consumers is not None:
        workers["num_consumers"] = consumers
    if min_delay is not None:
        workers["work_delay_min"] = min_delay
    if max_delay is not None:
        workers["work_delay_max"] = max_delay
    if capacity is not None:
        channel["capacity"] = capacity
    return Settings(
        channel=channel,
        workers=workers,
        timeouts=settings.timeouts.model_dump(),
        logging=settings.logging.model_dump(),
    )


def _render_result(result: RunResult, *, json_output: bool) -> None:
    if json_output:
        typer.echo(StatisticsAggregator(result).to_json())
        return

    table = Table(title="Producer-Consumer Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Total Items Produced", str(result.total_produced))
    table.add_row("Total Items Consumed", str(result.total_consumed))
    table.add_row("Destination Size", str(len(result.sink_contents)))
    table.add_row("Items Match", str(result.items_match))
    table.add_row("Peak Channel Size", str(result.channel_stats.max_size_reached))
    table.add_row("Duration", f"{result.duration_seconds:.2f}s")
    if result.cancelled_workers:
        table.add_row("Cancelled Workers", ", ".join(result.cancelled_workers))
    if result.failed_workers:
        table.add_row("Failed Workers", ", ".join(result.failed_workers))
    console.print(table)

    console.print("Destination Contents:")
    for item in result.sink_contents:
        console.print(f"  {item}")


@app.command("run")
def run_command(  # pylint: disable=too-many-arguments,too-many-locals
    producers: Annotated[
        Optional[int],
        typer.Option("--producers", "-p", min=1, help="Number of producer threads."),
    ] = None,
    consumers: Annotated[
        Optional[int],
        typer.Option("--consumers", "-c", min=1, help="Number of consumer threads."),
    ] = None,
    capacity: Annotated[
        Optional[int],
        typer.Option("--capacity", min=1, help="Channel capacity."),
    ] = None,
    items: Annotated[
        int,
        typer.Option("--items", "-n", min=0, help="Number of synthetic items."),
    ] = Pipeline.DEFAULT_ITEM_COUNT,
    min_delay: Annotated[
        Optional[float],
        typer.Option("--min-delay", min=0.0, help="Minimum simulated work per item (s)."),
    ] = None,
    max_delay: Annotated[
        Optional[float],
        typer.Option("--max-delay", min=0.0, help="Maximum simulated work per item (s)."),
    ] = None,
    demo_delays: Annotated[
        bool,
        typer.Option(
            "--demo-delays",
            help=(
                f"Use {WorkDelay.DEMO_MIN}-{WorkDelay.DEMO_MAX}s simulated work "
                "unless --min-delay/--max-delay are given."
            ),
        ),
    ] = False,
    config: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            exists=True,
            dir_okay=False,
            readable=True,
            help="TOML configuration file.",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print a JSON report instead of a table."),
    ] = False,
    log_level: Annotated[
        Optional[LogLevel],
        typer.Option("--log-level", case_sensitive=False, help="Logging level."),
    ] = None,
) -> None:
    """Run the pipeline over Item-1..Item-N split among the producers."""
    if demo_delays:
        min_delay = WorkDelay.DEMO_MIN if min_delay is None else min_delay
        max_delay = WorkDelay.DEMO_MAX if max_delay is None else max_delay

    try:
        settings = _apply_overrides(
            _load_settings(config),
            producers=producers,
            consumers=consumers,
            capacity=capacity,
            min_delay=min_delay,
            max_delay=max_delay,
        )
    except (ApplicationError, ValidationError) as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(CLIDefaults.EXIT_CONFIG_ERROR) from e

    setup_structured_logger(
        level=(log_level.value if log_level else settings.logging.level),
        log_file=settings.logging.file,
        use_rich_console=settings.logging.use_rich_console,
    )

    source = [f"{Pipeline.ITEM_PREFIX}{i}" for i in range(1, items + 1)]
    groups = split_items(source, settings.workers.num_producers)
    coordinator = Coordinator.from_settings(settings)

    try:
        result = coordinator.run(
            groups,
            settings.workers.num_consumers,
            settings.channel.capacity,
        )
    except PipelineConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(CLIDefaults.EXIT_CONFIG_ERROR) from e
    except LivenessTimeoutError as e:
        typer.echo(f"Run failed: {e}", err=True)
        if e.partial_result is not None:
            _render_result(e.partial_result, json_output=json_output)
        raise typer.Exit(CLIDefaults.EXIT_ERROR) from e
    except KeyboardInterrupt as e:
        logger.info("Command interrupted by user")
        coordinator.cancel()
        raise typer.Exit(CLIDefaults.EXIT_ERROR) from e
    except ConveyorError as e:
        typer.echo(f"Run failed: {e}", err=True)
        raise typer.Exit(CLIDefaults.EXIT_ERROR) from e

    _render_result(result, json_output=json_output)
    if not result.completed:
        raise typer.Exit(CLIDefaults.EXIT_ERROR)


@app.command("init-config")
def init_config_command(
    path: Annotated[Path, typer.Argument(help="Where to write the TOML file.")],
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing file."),
    ] = False,
) -> None:
    """Write the current settings (defaults plus environment) to a TOML file."""
    if path.exists() and not force:
        typer.echo(f"{path} already exists; use --force to overwrite.", err=True)
        raise typer.Exit(CLIDefaults.EXIT_ERROR)
    Settings().to_toml_file(path)
    typer.echo(f"Wrote configuration to {path}")
