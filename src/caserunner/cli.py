"""Command-line interface for caserunner."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from caserunner import __version__
from caserunner.config import RunnerConfig, create_example_config, get_default_config


console = Console()


def print_banner() -> None:
    """Print the caserunner banner."""
    console.print(
        Panel.fit(
            "[bold blue]caserunner[/bold blue] - test case execution engine",
            subtitle=f"v{__version__}",
        )
    )


def setup_logging(level: str) -> None:
    """Send log records to the console through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def load_config(config_path: Optional[str]) -> RunnerConfig:
    """Load the configuration file, falling back to defaults when none exists."""
    if config_path:
        return RunnerConfig.from_file(config_path)
    try:
        return RunnerConfig.find_and_load()
    except FileNotFoundError:
        return get_default_config()


@click.group()
@click.version_option(version=__version__, prog_name="caserunner")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False),
    help="Path to configuration file (default: caserunner.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """caserunner - run class-based unit tests through their full lifecycle."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="caserunner.json",
    help="Output path for configuration file",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing configuration")
@click.pass_context
def init(ctx: click.Context, output: str, force: bool) -> None:
    """Initialize a new caserunner configuration file."""
    print_banner()

    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(f"[yellow]Configuration file already exists:[/yellow] {output_path}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        create_example_config(output_path)
        console.print(f"[green]Created configuration file:[/green] {output_path}")
    except OSError as e:
        console.print(f"[red]Error creating configuration:[/red] {e}")
        sys.exit(1)


@main.command()
@click.argument("targets", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Write messages as JSON lines")
@click.option(
    "--stages/--no-stages",
    default=None,
    help="Show every lifecycle stage (default: from configuration)",
)
@click.option(
    "--path",
    "-p",
    "paths",
    multiple=True,
    type=click.Path(exists=True, file_okay=False),
    help="Directory to import test modules from (default: current directory)",
)
@click.pass_context
def run(
    ctx: click.Context,
    targets: tuple[str, ...],
    as_json: bool,
    stages: Optional[bool],
    paths: tuple[str, ...],
) -> None:
    """Run the tests of each TARGET (module:Class or module:Class.method)."""
    verbose = ctx.obj.get("verbose", False)

    try:
        config = load_config(ctx.obj.get("config_path"))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    setup_logging("DEBUG" if verbose else config.log_level)

    if as_json:
        config.output.format = "json"
    if stages is not None:
        config.output.show_stages = stages

    for path in reversed(paths or (".",)):
        resolved = str(Path(path).resolve())
        if resolved not in sys.path:
            sys.path.insert(0, resolved)

    from caserunner.core.loader import CaseLoader
    from caserunner.core.naming import DisplayNameFormatter
    from caserunner.core.runner import CaseRunner
    from caserunner.sinks import ConsoleSink, JsonSink

    json_output = config.output.format == "json"
    if not json_output:
        print_banner()

    loader = CaseLoader(formatter=DisplayNameFormatter.from_config(config.format))
    cases = []
    for target in targets:
        result = loader.load(target)
        if not result.success:
            console.print(f"[red]Cannot load {escape(target)}:[/red] {escape(result.error)}")
            sys.exit(1)
        cases.extend(result.cases)

    if json_output:
        sink = JsonSink()
    else:
        sink = ConsoleSink(console, show_stages=config.output.show_stages)

    summary = CaseRunner(config, sink).run(cases)

    if not json_output:
        _display_results_summary(summary.to_dict())

    if not summary.success:
        sys.exit(1)


def _display_results_summary(results: dict) -> None:
    """Display a summary of test results."""
    total = results.get("tests_run", 0)
    passed = results.get("tests_passed", 0)
    failed = results.get("tests_failed", 0)
    skipped = results.get("tests_skipped", 0)

    console.print("\n" + "=" * 50)
    console.print("[bold]Test Results Summary[/bold]")
    console.print("=" * 50)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Cases", str(results.get("cases", 0)))
    table.add_row("Total Tests", str(total))
    table.add_row("Passed", f"[green]{passed}[/green]")
    table.add_row("Failed", f"[red]{failed}[/red]")
    table.add_row("Skipped", f"[yellow]{skipped}[/yellow]")
    table.add_row("Time", f"{results.get('execution_time', 0.0):.3f}s")

    console.print(table)

    if failed > 0:
        console.print("\n[red]Some tests failed![/red]")
    else:
        console.print("\n[green]All tests passed![/green]")


if __name__ == "__main__":
    main()
