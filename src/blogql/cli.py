"""
``blogql`` command line: run the API server.
"""

import os

import click
import uvicorn

from blogql import __version__
from blogql.config import settings
from blogql.logging import configure_logging, get_logger

logger = get_logger(__name__)

APP_FACTORY = "blogql.api.app:create_app"
LOG_LEVELS = ["debug", "info", "warning", "error"]


@click.group()
@click.version_option(version=__version__, prog_name="blogql")
def cli() -> None:
    """blogql GraphQL blog API."""


@cli.command()
@click.option("--host", default=settings.api_host, show_default=True)
@click.option("--port", default=settings.api_port, type=int, show_default=True)
@click.option("--reload", is_flag=True, help="Restart on code changes (runs a single worker).")
@click.option("--workers", default=1, type=click.IntRange(min=1), show_default=True)
@click.option(
    "--log-level",
    default=settings.log_level.lower(),
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    show_default=True,
)
def serve(host: str, port: int, reload: bool, workers: int, log_level: str) -> None:
    """Serve the GraphQL endpoint with uvicorn."""
    log_level = log_level.lower()
    configure_logging(debug=settings.debug, level=log_level)

    # Worker processes build their own Settings from the environment
    os.environ["BLOGQL_LOG_LEVEL"] = log_level

    if reload and workers > 1:
        logger.warning("Reload mode runs a single worker", requested_workers=workers)
        workers = 1

    logger.info("Starting blogql API server", host=host, port=port, workers=workers)
    uvicorn.run(
        APP_FACTORY,
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level,
    )


def main() -> None:
    cli()
