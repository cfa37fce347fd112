import click
import os
import json
import toml
from .. import config as config_module
from ..cli_logger import logger

NO_CONFIG = "Error: No cargodroid.toml found. Create one with a [cargo] table first."


def _parse_value(value):
    """Interpret a command line value as TOML (numbers, booleans, lists), else keep the string."""
    try:
        return toml.loads(f"v = {value}")["v"]
    except (toml.TomlDecodeError, IndexError):
        return value


@click.group()
@click.pass_context
def config(ctx):
    """View or edit the cargodroid.toml configuration file."""
    pass

@config.command()
@click.pass_context
def view(ctx):
    """View the contents of the cargodroid.toml file."""
    conf = config_module.load_config(path=ctx.obj["path"])
    if not conf:
        logger.error(NO_CONFIG)
        return
    config_file_path = os.path.join(ctx.obj["path"], config_module.CONFIG_FILE)
    try:
        with open(config_file_path, 'r') as f:
            click.echo(f.read())
    except IOError as e:
        logger.error(f"Error reading cargodroid.toml at {config_file_path}: {e}")
        logger.lifecycle("Please check file permissions.")

@config.command(name="list")
@click.pass_context
def list_config(ctx):
    """List all configuration keys and values."""
    conf = config_module.load_config(path=ctx.obj["path"])
    if not conf:
        logger.error(NO_CONFIG)
        return
    click.echo(json.dumps(conf, indent=4))

@config.command()
@click.argument('key')
@click.pass_context
def get(ctx, key):
    """Get a value from the cargodroid.toml file."""
    conf = config_module.load_config(path=ctx.obj["path"])
    if not conf:
        logger.error(NO_CONFIG)
        return

    value = conf
    try:
        for k in key.split('.'):
            value = value[k]
        click.echo(value)
    except (KeyError, TypeError):
        logger.error(f"Error: Key '{key}' not found in cargodroid.toml")

@config.command(name="set")
@click.argument('key')
@click.argument('value')
@click.pass_context
def set_value(ctx, key, value):
    """Set a value in the cargodroid.toml file.

    VALUE is read as TOML when possible, e.g. `21`, `true` or `["arm64"]`.
    """
    conf = config_module.load_config(path=ctx.obj["path"])

    keys = key.split('.')
    d = conf
    for k in keys[:-1]:
        d = d.setdefault(k, {})
    d[keys[-1]] = _parse_value(value)

    if config_module.save_config(conf, path=ctx.obj["path"]):
        logger.lifecycle(f"Set '{key}' to '{value}'")

@config.command()
@click.argument('key')
@click.pass_context
def unset(ctx, key):
    """Remove a key from the cargodroid.toml file."""
    conf = config_module.load_config(path=ctx.obj["path"])
    if not conf:
        logger.error(NO_CONFIG)
        return

    keys = key.split('.')
    d = conf
    try:
        for k in keys[:-1]:
            d = d[k]
        del d[keys[-1]]
        if config_module.save_config(conf, path=ctx.obj["path"]):
            logger.lifecycle(f"Unset '{key}'")
    except (KeyError, TypeError):
        logger.error(f"Error: Key '{key}' not found in cargodroid.toml")
