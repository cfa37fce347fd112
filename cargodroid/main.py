import click
from .cli_logger import logger, DEBUG, INFO, WARNING
from .commands import *


@click.group()
@click.option("--path", "-p", default=".", help="Path to the project directory.")
@click.option("--info", "log_level", flag_value=INFO, help="Log more, and pass --verbose to cargo.")
@click.option("--debug", "log_level", flag_value=DEBUG, help="Log everything, including the cargo environment.")
@click.option("--quiet", "-q", "log_level", flag_value=WARNING, help="Only log warnings and errors.")
@click.pass_context
def cli(ctx, path, log_level):
    """cargodroid: build Rust libraries for Android and desktop with cargo."""
    if log_level is not None:
        logger.set_level(log_level)
    ctx.obj = {"path": path}

cli.add_command(build)
cli.add_command(test)
cli.add_command(clippy)
cli.add_command(targets)
cli.add_command(doctor)
cli.add_command(config)
cli.add_command(version)
cli.add_command(log)

if __name__ == '__main__':
    cli()
