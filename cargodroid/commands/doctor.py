import shutil
import sys
import click
from .. import config as config_module
from ..cli_logger import logger
from ..errors import CargoDroidError
from ..toolchains import ToolchainType, find_toolchain, locate_ndk, ndk_major_version
from ..triple import detect_default_target_triple


def check_environment(path="."):
    """Check the configuration, cargo, rustc and the NDK. Returns True if all is well."""
    try:
        settings = config_module.load_settings(path=path)
    except CargoDroidError as e:
        logger.error(e.format_message())
        return False

    all_ok = True
    for tool in (settings.cargo_command, settings.rustc_command):
        found = shutil.which(tool)
        if found:
            logger.lifecycle(f"  - {tool}: {found}")
        else:
            logger.warning(f"'{tool}' was not found on PATH. Install Rust from https://rustup.rs.")
            all_ok = False

    triple = detect_default_target_triple(settings.rustc_command)
    if triple:
        logger.lifecycle(f"  - Default target triple: {triple}")
    else:
        all_ok = False

    try:
        toolchains = [find_toolchain(name, settings.use_prebuilt) for name in settings.targets]
    except CargoDroidError as e:
        logger.error(e.format_message())
        return False

    if any(t.type is ToolchainType.ANDROID_PREBUILT for t in toolchains):
        try:
            ndk_root = locate_ndk(settings.ndk_directory, settings.ndk_version)
            major = ndk_major_version(ndk_root)
            logger.lifecycle(f"  - Android NDK: {ndk_root} (r{major if major is not None else '?'})")
        except CargoDroidError as e:
            logger.warning(e.format_message())
            all_ok = False

    return all_ok


@click.command()
@click.pass_context
def doctor(ctx):
    """Check that cargo, rustc and the Android NDK can be found."""
    logger.lifecycle("Running environment check...")
    if check_environment(ctx.obj["path"]):
        logger.success("Environment check completed successfully.")
    else:
        logger.error("Environment check found issues. Please review the warnings/errors above.")
        sys.exit(1)
