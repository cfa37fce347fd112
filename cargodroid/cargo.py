"""
The cargo operations: build, test and clippy.

Each one checks its inputs, probes rustc for the default target triple once
per process, assembles the command and runs it with live output.
"""

import os

from .cli_logger import logger
from .command_builder import BuildRequest, build_cargo_command
from .config import validate_profile
from .errors import BuildProcessFailure
from .host import detect_host
from .toolchains import ToolchainType, find_toolchain, locate_ndk, ndk_major_version
from .triple import default_target_triple
from .utils.command_executor import run_command, OutputPolicy
from .wrappers import install_wrapper_scripts

EXTRA_ARGUMENTS = {
    "build": "extra_build_arguments",
    "test": "extra_test_arguments",
    "clippy": "extra_clippy_arguments",
}


def run_cargo(command, settings, toolchain, profile=None, features=None, extra_args=None, *,
              properties=None, channel=None, verbose=None, host=None, dry_run=False):
    """
    Run one cargo command for one toolchain.

    Arguments left as None fall back to the settings. Returns the CargoCommand
    that was (or, with dry_run, would have been) executed.

    Raises:
        ConfigurationError: Invalid profile, before anything is spawned
        ToolchainResolutionError: No NDK for a prebuilt toolchain, before anything is spawned
        BuildProcessFailure: cargo exited non-zero
    """
    host = host or detect_host()
    profile = validate_profile(profile or settings.profile)
    if extra_args is None:
        extra_args = getattr(settings, EXTRA_ARGUMENTS.get(command, ""), ())

    ndk_locator = None
    ndk_major = None
    if toolchain.type is ToolchainType.ANDROID_PREBUILT:
        ndk_root = locate_ndk(settings.ndk_directory, settings.ndk_version)
        ndk_major = ndk_major_version(ndk_root)
        ndk_locator = lambda: ndk_root

    request = BuildRequest(
        command=command,
        toolchain=toolchain,
        profile=profile,
        features=features if features is not None else settings.features,
        extra_args=tuple(extra_args),
        properties=dict(settings.properties if properties is None else properties),
        working_dir=settings.module_dir,
        channel=settings.rustup_channel if channel is None else channel,
        verbose=settings.verbose if verbose is None else verbose,
    )

    triple = default_target_triple(settings.rustc_command)
    cargo_command = build_cargo_command(request, settings, triple, host=host,
                                        ndk_locator=ndk_locator, ndk_major=ndk_major)

    logger.lifecycle(f"cargo {command} for {toolchain.platform} ({toolchain.target}, {profile})")
    logger.info(f"  - Command: {' '.join(cargo_command.argv)}")
    for key, value in cargo_command.env.items():
        logger.debug(f"  - {key}={value}")

    if dry_run:
        return cargo_command

    if toolchain.type is not ToolchainType.DESKTOP:
        install_wrapper_scripts(settings.build_root)

    if not os.path.isdir(cargo_command.cwd):
        logger.warning(f"Cargo module directory {cargo_command.cwd} does not exist.")

    result = run_command(cargo_command.argv, env=cargo_command.env, cwd=cargo_command.cwd,
                         output=OutputPolicy.STREAM)
    if result.returncode != 0:
        raise BuildProcessFailure(cargo_command.argv, result.returncode)
    logger.success(f"cargo {command} for {toolchain.platform} finished.")
    return cargo_command


def cargo_build(settings, toolchain, profile=None, features=None, extra_args=None, **kwargs):
    return run_cargo("build", settings, toolchain, profile, features, extra_args, **kwargs)


def cargo_test(settings, toolchain, profile=None, features=None, extra_args=None, **kwargs):
    return run_cargo("test", settings, toolchain, profile, features, extra_args, **kwargs)


def cargo_clippy(settings, toolchain, profile=None, features=None, extra_args=None, **kwargs):
    return run_cargo("clippy", settings, toolchain, profile, features, extra_args, **kwargs)


def run_for_targets(command, settings, targets=None, **kwargs):
    """Run a cargo command for every configured (or given) target, stopping at the first failure."""
    toolchains = [find_toolchain(name, settings.use_prebuilt) for name in (targets or settings.targets)]
    return [run_cargo(command, settings, toolchain, **kwargs) for toolchain in toolchains]
