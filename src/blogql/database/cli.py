"""
``blogql-migrate``: apply the Alembic migrations kept at the repository root.
"""

from pathlib import Path

import click
from alembic import command
from alembic.config import Config

from blogql.logging import configure_logging, get_logger

logger = get_logger(__name__)

# src/blogql/database/cli.py -> repository root
PROJECT_ROOT = Path(__file__).resolve().parents[3]


def get_alembic_config(root: Path = PROJECT_ROOT) -> Config:
    ini_path = root / "alembic.ini"
    if not ini_path.is_file():
        raise click.ClickException(f"alembic.ini not found at {ini_path}")

    config = Config(str(ini_path))
    config.set_main_option("script_location", str(root / "alembic"))
    return config


@click.group()
@click.option("--debug", is_flag=True, help="Human-readable debug logging.")
def main(debug: bool) -> None:
    """Manage the blogql database schema."""
    configure_logging(debug=debug)


@main.command()
@click.argument("revision", default="head")
def upgrade(revision: str) -> None:
    """Migrate the schema forward to REVISION (default: head)."""
    logger.info("Upgrading database schema", revision=revision)
    command.upgrade(get_alembic_config(), revision)


@main.command()
@click.argument("revision")
def downgrade(revision: str) -> None:
    """Migrate the schema back to REVISION (for example -1 or base)."""
    logger.info("Downgrading database schema", revision=revision)
    command.downgrade(get_alembic_config(), revision)


@main.command()
def current() -> None:
    """Print the revision the database is at."""
    command.current(get_alembic_config(), verbose=True)
