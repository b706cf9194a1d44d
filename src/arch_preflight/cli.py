"""CLI entry point for arch-preflight."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from arch_preflight import __version__
from arch_preflight.graph.loader import GraphFileError, read_graph_file
from arch_preflight.preflight import PreflightResult, run_preflight


@click.command()
@click.argument("graph_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option(
    "-f", "--format", "fmt",
    type=click.Choice(["md", "json"], case_sensitive=False),
    default="md",
    help="Output format (default: md).",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, resolve_path=True),
    default=None,
    help="Output file path. Defaults to stdout.",
)
@click.option(
    "--strict", is_flag=True, default=False,
    help="Exit non-zero on warnings as well as errors.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose logging.")
@click.version_option(version=__version__)
def main(
    graph_file: str,
    fmt: str,
    output: str | None,
    strict: bool,
    verbose: bool,
) -> None:
    """Validate an exported architecture graph (JSON or YAML) before code generation."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    path = Path(graph_file)
    try:
        graphs = read_graph_file(path)
    except GraphFileError as exc:
        raise click.ClickException(str(exc)) from exc

    result = run_preflight(graphs, source=path)

    if fmt == "json":
        _output_json(result, output)
    else:
        _output_md(result, output)

    if not result.passed(strict=strict):
        sys.exit(1)


def _output_md(result: PreflightResult, output: str | None) -> None:
    from arch_preflight.render.markdown import render_markdown
    md = render_markdown(result)
    if output:
        Path(output).write_text(md)
        click.echo(f"Report written to {output}")
    else:
        click.echo(md)


def _output_json(result: PreflightResult, output: str | None) -> None:
    data = {
        "validation": result.validation.model_dump(mode="json", by_alias=True),
        "queries": [
            {
                "nodeId": r.node_id,
                "nodeLabel": r.node_label,
                "tab": r.tab,
                "dbType": r.db_type,
                "query": r.query.model_dump(mode="json", by_alias=True),
                "performance": r.performance.model_dump(mode="json", by_alias=True),
            }
            for r in result.queries
        ],
    }

    text = json.dumps(data, indent=2)
    if output:
        Path(output).write_text(text)
        click.echo(f"JSON report written to {output}")
    else:
        click.echo(text)


if __name__ == "__main__":
    main()
