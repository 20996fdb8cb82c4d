"""
Command line entry point.

Flags override the environment-derived settings; anything not given on the
command line falls back to the environment and then to the defaults.

Example:
    vault-audit-exporter --audit-addr :9090 --http-addr :8080 --cache-ttl 5m
"""

import logging
from typing import Annotated, Optional

import typer
import uvicorn
from pydantic import ValidationError

from vault_audit_exporter import __version__, application
from vault_audit_exporter.exceptions import ConfigurationError
from vault_audit_exporter.logging import setup_logging
from vault_audit_exporter.settings import Settings
from vault_audit_exporter.utils.network import split_host_port
from vault_audit_exporter.uvicorn_filters import ExcludeMonitoringPathsFilter

# Exit code used by uvicorn when the application fails to start
STARTUP_FAILURE = 3

typer_app = typer.Typer(
    name="vault-audit-exporter",
    help="Export Prometheus metrics from a Vault socket audit device",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@typer_app.command()
def serve(
    audit_network: Annotated[
        Optional[str],
        typer.Option(
            help="Network to listen for audit log connections on "
            "(tcp, tcp4, tcp6, unix)"
        ),
    ] = None,
    audit_addr: Annotated[
        Optional[str],
        typer.Option(help="Address to listen for audit log connections on"),
    ] = None,
    http_addr: Annotated[
        Optional[str],
        typer.Option(
            help="Address to bind the HTTP server (including /metrics) to"
        ),
    ] = None,
    cache_ttl: Annotated[
        Optional[str],
        typer.Option(
            help="Length of time to cache request timestamps for "
            "calculating latency (e.g. 5m)"
        ),
    ] = None,
    cache_cleanup: Annotated[
        Optional[str],
        typer.Option(
            help="Interval at which expired entries in the request "
            "timestamp cache are evicted (e.g. 1m)"
        ),
    ] = None,
    log_level: Annotated[
        Optional[str], typer.Option(help="Log level (DEBUG, INFO, ...)")
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Print version information and exit",
        ),
    ] = False,
) -> None:
    """Listen for Vault audit log events and serve Prometheus metrics."""
    overrides = {
        "AUDIT_NETWORK": audit_network,
        "AUDIT_ADDR": audit_addr,
        "HTTP_ADDR": http_addr,
        "CACHE_TTL": cache_ttl,
        "CACHE_CLEANUP": cache_cleanup,
        "LOG_LEVEL": log_level,
    }
    try:
        settings = Settings(
            **{key: value for key, value in overrides.items() if value is not None}
        )
        http_host, http_port = split_host_port(settings.HTTP_ADDR)
        logger = setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
        app = application(settings)
    except (ValidationError, ConfigurationError) as ex:
        typer.echo(f"Invalid configuration: {ex}", err=True)
        raise typer.Exit(code=2)

    logger.info(f"Starting vault-audit-exporter {__version__}")

    logging.getLogger("uvicorn.access").addFilter(
        ExcludeMonitoringPathsFilter(settings.LOG_EXCLUDED_PATHS)
    )

    config = uvicorn.Config(
        app,
        host=http_host or "0.0.0.0",
        port=http_port,
        lifespan="on",
        log_config=None,
    )
    server = uvicorn.Server(config)
    server.run()

    if not server.started:
        raise typer.Exit(code=STARTUP_FAILURE)


def main() -> None:
    typer_app()


if __name__ == "__main__":
    main()
