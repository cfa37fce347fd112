import shlex
import click
from .. import cargo
from .. import config as config_module
from ..decorators import handle_exceptions
from ..features import FeatureSpec
from ..cli_logger import logger


def cargo_options(func):
    """Options shared by the build, test and clippy commands."""
    decorators = [
        click.option("--target", "-t", "targets", multiple=True,
                     help="Target to run for (e.g. arm64, x86_64, linux-x86-64). Defaults to the configured targets."),
        click.option("--profile", default=None, help="Build profile, 'dev' or 'release'."),
        click.option("--all-features", is_flag=True, help="Activate all available features."),
        click.option("--no-default-features", is_flag=True, help="Do not activate the default feature."),
        click.option("--features", "feature_names", multiple=True,
                     help="Features to activate, space or comma separated. May be repeated."),
        click.option("--channel", default=None, help="rustup toolchain channel, e.g. nightly."),
        click.option("--verbose/--no-verbose", default=None, help="Pass --verbose to cargo."),
        click.option("-P", "property_args", multiple=True, metavar="KEY=VALUE",
                     help="Set a property, e.g. -P TARGET_AARCH64_LINUX_ANDROID_FOO=bar."),
        click.option("--dry-run", is_flag=True, help="Print the cargo commands instead of running them."),
        click.argument("extra_args", nargs=-1, type=click.UNPROCESSED),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _feature_spec(all_features, no_default_features, feature_names):
    names = [name for value in feature_names for name in value.replace(",", " ").split()]
    if all_features:
        if no_default_features or names:
            raise click.UsageError("--all-features cannot be combined with --no-default-features or --features.")
        return FeatureSpec.all()
    if no_default_features:
        return FeatureSpec.no_default_but(*names)
    if names:
        return FeatureSpec.default_and(*names)
    return None


def _parse_properties(property_args):
    properties = {}
    for arg in property_args:
        key, sep, value = arg.partition("=")
        if not sep or not key:
            raise click.UsageError(f"Property must look like KEY=VALUE, got '{arg}'.")
        properties[key] = value
    return properties


def _echo_command(cargo_command):
    click.echo(f"cd {shlex.quote(cargo_command.cwd)}")
    for key, value in cargo_command.env.items():
        click.echo(f"{key}={shlex.quote(value)}")
    click.echo(" ".join(shlex.quote(arg) for arg in cargo_command.argv))


def run_cargo_command(ctx, command, targets, profile, all_features, no_default_features, feature_names,
                      channel, verbose, property_args, dry_run, extra_args):
    settings = config_module.load_settings(path=ctx.obj["path"])
    features = _feature_spec(all_features, no_default_features, feature_names)
    properties = {**settings.properties, **_parse_properties(property_args)}

    commands = cargo.run_for_targets(
        command,
        settings,
        targets=list(targets) or None,
        profile=profile,
        features=features,
        extra_args=list(extra_args) or None,
        properties=properties,
        channel=channel,
        verbose=verbose,
        dry_run=dry_run,
    )
    if dry_run:
        for cargo_command in commands:
            _echo_command(cargo_command)
    else:
        logger.success(f"cargo {command} completed for {len(commands)} target(s).")


@click.command(context_settings={"ignore_unknown_options": True})
@cargo_options
@click.pass_context
@handle_exceptions
def build(ctx, **options):
    """Build the Rust library for each target.

    Arguments after `--` are passed to cargo unchanged.
    """
    run_cargo_command(ctx, "build", **options)
