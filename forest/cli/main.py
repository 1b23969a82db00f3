"""
Forest CLI - inventory the bindings and declarations of a Rust project.

Usage:
    forest PROJECT_DIR                       Print the text report
    forest PROJECT_DIR -o out.json -f json   Write a JSON report
    forest PROJECT_DIR --tree                Print the source tree only
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from forest import __version__
from forest.config import ForestConfig
from forest.extraction.orchestrator import ExtractionOrchestrator
from forest.output.formatter import OutputFormat, render_text, write_report
from forest.types.errors import ForestError
from forest.utils.files import render_tree
from forest.utils.logger import configure_logging, logger
from forest.utils.metadata import load_project_metadata


def _fail(error: ForestError) -> None:
    click.echo(error.get_formatted_message(), err=True)
    logger.debug(f"{error.__class__.__name__}: {error}")
    sys.exit(1)


@click.command()
@click.argument("project_dir", type=click.Path(file_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the report to FILE instead of printing it.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat], case_sensitive=False),
    default=OutputFormat.TEXT.value,
    show_default=True,
    help="Report format used with --output.",
)
@click.option("--sort", "-s", is_flag=True, help="Sort variables by name.")
@click.option("--tree", "-t", is_flag=True, help="Print the project tree and exit.")
@click.option("--link", "-l", is_flag=True, help="Include vscode:// links to each location.")
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    default=None,
    help="Files to analyse concurrently (default: FOREST_WORKERS or 1).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr.")
@click.version_option(version=__version__, prog_name="Forest", message="%(prog)s v%(version)s")
def cli(
    project_dir: Path,
    output_file: Path | None,
    output_format: str,
    sort: bool,
    tree: bool,
    link: bool,
    workers: int | None,
    verbose: bool,
) -> None:
    """Forest - explore a Rust project.

    Lists every variable binding (mutable and immutable, with declaration
    kind, inferred type and enclosing function) and every function, struct
    and enum declaration under PROJECT_DIR.
    """
    configure_logging(verbose=verbose)

    try:
        config = ForestConfig.from_env(workers=workers)

        if tree:
            click.echo(f"Generating tree-like representation for project at: {project_dir}")
            for line in render_tree(project_dir, config):
                click.echo(line)
            return

        metadata = load_project_metadata(project_dir)
        click.echo(f"Analysis run at: {metadata.datetime_label}")
        click.echo(f"Analyzing Rust project at: {project_dir}")
        click.echo(f"Project version: {metadata.version}")

        results = ExtractionOrchestrator(config=config).analyse_project(project_dir)
        if sort:
            results = results.sorted_by_name()

        click.echo("")
        click.echo(click.style("Summary:", bold=True))
        click.echo(f"Found {len(results.mutable_bindings)} mutable variables")
        click.echo(f"Found {len(results.immutable_bindings)} immutable variables")
        click.echo(f"Found {len(results.declarations)} data structure objects")
        if results.errors:
            click.echo(f"Skipped {len(results.errors)} unreadable files")

        if output_file is not None:
            write_report(results, metadata, output_file, OutputFormat.parse(output_format), link)
            click.echo(f"Results written to: {output_file}")
        else:
            click.echo("")
            click.echo(render_text(results, metadata, link), nl=False)
    except ForestError as e:
        _fail(e)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
