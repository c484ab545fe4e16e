"""Typer CLI for swiftprebuilt."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator

import typer
from dotenv import load_dotenv
from rich.console import Console

from swiftprebuilt.config import DEFAULT_CONFIG_TEMPLATE, PrebuiltConfig
from swiftprebuilt.errors import SynthesisError

load_dotenv()

app = typer.Typer(
    name="swiftprebuilt",
    help="Generate Bazel files for a prebuilt swift-syntax release archive.",
    no_args_is_help=True,
)
console = Console()

LOG_FILE = ".swiftprebuilt.log"


def _load_config(config_path: Path | None, output: Path | None = None) -> PrebuiltConfig:
    config = PrebuiltConfig.load(config_path)
    if output is not None:
        config.output.dir = str(output)
    problems = config.validate()
    if problems:
        for p in problems:
            console.print(f"[red]{p}[/red]")
        raise typer.Exit(2)
    return config


@contextmanager
def _log_handlers(out_dir: Path, debug: bool) -> Iterator[logging.Logger]:
    """Log to a file in the output directory, and to stderr with --debug."""
    out_dir.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger("swiftprebuilt")
    logger.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(out_dir / LOG_FILE, mode="w")
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    handlers: list[logging.Handler] = [file_handler]
    if debug:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        handlers.append(stream_handler)

    for h in handlers:
        logger.addHandler(h)
    try:
        yield logger
    finally:
        for h in handlers:
            logger.removeHandler(h)
            h.close()


def _build_archive(
    config: PrebuiltConfig, logger: logging.Logger, *, dry_run: bool, include_artifacts: bool
) -> None:
    from swiftprebuilt.pipeline import run_pipeline, write_outputs

    try:
        with console.status("[bold green]Querying build graph..."):
            result = run_pipeline(config)
        if dry_run:
            written = []
        else:
            written = write_outputs(result, config, include_artifacts=include_artifacts)
    except (SynthesisError, OSError) as e:
        logger.error("%s", e)
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if dry_run:
        archive = result.release.archive_name
        for rel_path, content in result.files.items():
            console.print(f"\n[bold]{archive}/{rel_path}[/bold]\n")
            console.print(content, markup=False, highlight=False)
        if include_artifacts:
            console.print(f"\n[bold]{len(result.artifact_sources)} build outputs:[/bold]")
            for dest, source in result.artifact_sources.items():
                console.print(f"  {source} -> {archive}/{dest}", highlight=False)
        console.print("\n[dim]Dry run, no files written.[/dim]")
        return

    console.print(
        f"\n[bold green]Done![/bold green] {len(result.declarations)} modules,"
        f" wrote {len(written)} files:"
    )
    for path in written:
        console.print(f"  {path}")


@app.command()
def generate(
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Directory for the archive")
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Preview without writing files")
    ] = False,
    config_path: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to swiftprebuilt.toml")
    ] = None,
    debug: Annotated[
        bool, typer.Option("--debug", help="Log every query and discovered target")
    ] = False,
) -> None:
    """Query the checkout and write BUILD.bazel and MODULE.bazel for the archive."""
    config = _load_config(config_path, output)
    with _log_handlers(Path(config.output.dir), debug) as logger:
        _build_archive(config, logger, dry_run=dry_run, include_artifacts=False)


@app.command()
def collect(
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Directory for the archive")
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="List what would be copied")
    ] = False,
    config_path: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to swiftprebuilt.toml")
    ] = None,
    debug: Annotated[
        bool, typer.Option("--debug", help="Log every query and discovered target")
    ] = False,
) -> None:
    """Write the archive with its compiled libraries, after `bazel build` has run."""
    config = _load_config(config_path, output)
    with _log_handlers(Path(config.output.dir), debug) as logger:
        _build_archive(config, logger, dry_run=dry_run, include_artifacts=True)


@app.command()
def prepare(
    config_path: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to swiftprebuilt.toml")
    ] = None,
) -> None:
    """Pin rule versions in the source checkout before querying or building it."""
    from swiftprebuilt.pipeline import prepare_source

    config = _load_config(config_path)
    if not config.source_path.is_dir():
        console.print(f"[red]Source checkout not found at {config.source_path}[/red]")
        raise typer.Exit(1)
    for path in prepare_source(config):
        console.print(f"[green]Wrote {path}[/green]")


@app.command()
def init(
    path: Annotated[
        Path, typer.Option("--path", "-p", help="Where to create swiftprebuilt.toml")
    ] = Path("."),
) -> None:
    """Create a swiftprebuilt.toml config file."""
    target = path / "swiftprebuilt.toml"
    if target.exists():
        console.print(f"[yellow]{target} already exists.[/yellow]")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    console.print(f"[green]Created {target}[/green]")


@app.command()
def tag(
    config_path: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to swiftprebuilt.toml")
    ] = None,
) -> None:
    """Print the release tag and archive name."""
    config = PrebuiltConfig.load(config_path)
    if not config.versions.swift_syntax:
        console.print("[red]versions.swift_syntax is required (or set SWIFT_SYNTAX_VERSION)[/red]")
        raise typer.Exit(2)
    release = config.release
    console.print(release.tag, highlight=False)
    console.print(release.archive_name, highlight=False)


@app.command()
def graph(
    config_path: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to swiftprebuilt.toml")
    ] = None,
) -> None:
    """List modules in dependency order with their resolved deps."""
    from swiftprebuilt.pipeline import run_pipeline
    from swiftprebuilt.synthesis.synthesizer import dependency_order

    config = _load_config(config_path)
    try:
        result = run_pipeline(config)
    except SynthesisError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    by_name = {d.name: d for d in result.declarations}
    for name in dependency_order(result.declarations):
        deps = ", ".join(by_name[name].dependencies) or "-"
        console.print(f"[bold]{name}[/bold] [dim]<- {deps}[/dim]")
