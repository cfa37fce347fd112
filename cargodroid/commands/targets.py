import click
from .. import config as config_module
from ..toolchains import TOOLCHAINS, ToolchainType


@click.command()
@click.pass_context
def targets(ctx):
    """List the targets cargodroid knows about."""
    conf = config_module.load_config(path=ctx.obj["path"])
    cargo_conf = conf.get("cargo", {})
    configured = set(cargo_conf.get("targets", []))
    generated = bool(cargo_conf.get("toolchain_directory"))
    skip = ToolchainType.ANDROID_PREBUILT if generated else ToolchainType.ANDROID_GENERATED

    for toolchain in TOOLCHAINS:
        if toolchain.type is skip:
            continue
        marker = "*" if toolchain.platform in configured else " "
        click.echo(f"{marker} {toolchain.platform:<18} {toolchain.target:<26} {toolchain.type.value:<18} {toolchain.folder}")
