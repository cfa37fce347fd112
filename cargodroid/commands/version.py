import sys
import click
import importlib.metadata
from ..cli_logger import logger

@click.command()
def version():
    """Print the version of cargodroid."""
    try:
        ver = importlib.metadata.version("cargodroid")
        click.echo(f"cargodroid version {ver}")
    except importlib.metadata.PackageNotFoundError:
        logger.error("Error: Could not determine the version of cargodroid. Is it installed correctly?")
        sys.exit(1)
