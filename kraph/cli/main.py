"""``kraph build <source>`` commands.

Each command builds the object graph of one source and writes it as DOT
to stdout or ``--output``. Logs go to stderr.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import replace
from typing import Any

import click

from kraph import __version__
from kraph.app import build_github, build_kubernetes, build_seed
from kraph.config import load_config
from kraph.errors import KraphError
from kraph.graph import MemoryGraph
from kraph.models.config import KraphConfig
from kraph.observability.logging import get_logger, setup_logging


def _graph_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every build command."""
    fn = click.option(
        "--depth", type=click.IntRange(min=0), default=1, show_default=True, help="Subgraph depth for --root."
    )(fn)
    fn = click.option("--root", default=None, help="Only write the subgraph around this object UID.")(fn)
    fn = click.option(
        "-o", "--output", type=click.File("w"), default="-", help="DOT output file (default: stdout)."
    )(fn)
    return fn


def _write(graph: MemoryGraph, output: Any, root: str | None, depth: int) -> None:
    if root is not None:
        try:
            graph = graph.subgraph(root, depth)
        except KraphError as exc:
            raise click.ClickException(str(exc)) from exc
    output.write(graph.dot())
    get_logger("cli").info("graph_written", nodes=graph.node_count, edges=graph.edge_count)


def _run(fn: Callable[[], MemoryGraph]) -> MemoryGraph:
    try:
        return fn()
    except KraphError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.version_option(__version__, prog_name="kraph")
@click.option("--log-level", type=click.Choice(["debug", "info", "warning", "error"]), default=None)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Map API objects into a graph and export it as DOT."""
    try:
        config = load_config()
    except ValueError as exc:
        raise click.ClickException(f"invalid configuration: {exc}") from exc
    if log_level is not None:
        config.log.level = log_level
    setup_logging(config.log.level, config.log.format)
    ctx.obj = config


@cli.group()
def build() -> None:
    """Build the graph of one source."""


@build.command()
@click.option("-n", "--namespace", default=None, help="Only map objects of this namespace.")
@_graph_options
@click.pass_obj
def kubernetes(config: KraphConfig, namespace: str | None, output: Any, root: str | None, depth: int) -> None:
    """Map the objects of the current Kubernetes cluster."""
    if namespace is not None:
        config = replace(config, scraper=replace(config.scraper, namespace=namespace))
    graph = _run(lambda: asyncio.run(build_kubernetes(config)))
    _write(graph, output, root, depth)


@build.command()
@click.option("-u", "--user", default=None, help="GitHub user whose starred repositories are mapped.")
@_graph_options
@click.pass_obj
def github(config: KraphConfig, user: str | None, output: Any, root: str | None, depth: int) -> None:
    """Map the repositories starred by a GitHub user."""
    if user is not None:
        config = replace(config, github=replace(config.github, user=user))
    graph = _run(lambda: asyncio.run(build_github(config)))
    _write(graph, output, root, depth)


@build.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@_graph_options
@click.pass_obj
def seed(config: KraphConfig, path: str, output: Any, root: str | None, depth: int) -> None:
    """Build the graph of a YAML seed file."""
    graph = _run(lambda: build_seed(path, config))
    _write(graph, output, root, depth)
