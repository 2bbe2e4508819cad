"""Command-line entry point.

Every flag is validated before the cluster is contacted; the process then
runs as a long-lived observer until interrupted.
"""

from __future__ import annotations

import asyncio
import sys

import click

from kubemirror import __version__
from kubemirror.app import EXIT_CONFIGURATION, EXIT_FAILURE, WatchRequest, main
from kubemirror.config import load_config
from kubemirror.discovery.resolver import split_api_version
from kubemirror.discovery.target import check_scope_flags
from kubemirror.errors import ConfigurationError, DiscoveryError
from kubemirror.observability.logging import setup_logging
from kubemirror.sinks import OUTPUT_CHOICES


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--apiversion", required=True, help='api and version of the resource (e.g.: "networking.k8s.io/v1")')
@click.option("--kind", required=True, help='Kind of the resource (e.g: "Ingress")')
@click.option("--namespace", default=None, help="namespace to be used")
@click.option("--global", "global_", is_flag=True, default=False, help="query for the resource globally")
@click.option(
    "--output",
    type=click.Choice(OUTPUT_CHOICES),
    default="console",
    show_default=True,
    help="where observed events are written",
)
@click.option("--show-objects", is_flag=True, default=False, help="include touched objects in console output")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="overrides KUBEMIRROR_LOG_LEVEL",
)
@click.version_option(__version__, prog_name="kubemirror")
def cli(
    apiversion: str,
    kind: str,
    namespace: str | None,
    global_: bool,
    output: str,
    show_objects: bool,
    log_level: str | None,
) -> None:
    """Mirror one Kubernetes resource type and report every change."""
    try:
        check_scope_flags(namespace, global_)
        split_api_version(apiversion)
        config = load_config()
    except ConfigurationError as exc:
        click.echo(f"error: {exc}", err=True)
        sys.exit(EXIT_CONFIGURATION)
    except DiscoveryError as exc:
        click.echo(f"error: {exc}", err=True)
        sys.exit(EXIT_FAILURE)

    if log_level is not None:
        config.log.level = log_level
    setup_logging(config.log.level, config.log.format)

    request = WatchRequest(
        api_version=apiversion,
        kind=kind,
        namespace=namespace,
        global_=global_,
        output=output,
        show_objects=show_objects,
    )
    sys.exit(asyncio.run(main(config, request)))
