import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .cli_logger import logger, INFO
from .config import get_flag_property, validate_profile
from .features import FeatureSpec, encode_features
from .host import HostPlatform, detect_host
from .toolchains import Toolchain, ToolchainType, resolve_toolchain

CLANG_SYS_PROPERTY = "cargodroid.autoConfigureClangSys"
CLANG_SYS_ENV = "CARGODROID_AUTO_CONFIGURE_CLANG_SYS"


@dataclass(frozen=True)
class BuildRequest:
    """Everything that varies between two cargo invocations."""

    command: str
    toolchain: Toolchain
    profile: str
    features: FeatureSpec = field(default_factory=FeatureSpec)
    extra_args: Tuple[str, ...] = ()
    properties: Dict[str, str] = field(default_factory=dict)
    working_dir: str = "."
    channel: str = ""
    verbose: Optional[bool] = None


@dataclass
class CargoCommand:
    argv: List[str]
    env: Dict[str, str]
    cwd: str


def env_target(triple):
    """'x86_64-linux-android' -> 'X86_64_LINUX_ANDROID', as used in CARGO_TARGET_* keys."""
    return triple.upper().replace("-", "_")


def passthrough_env(properties, triple):
    """Map TARGET_<TRIPLE>_<KEY> properties to <KEY> environment variables."""
    prefix = f"TARGET_{env_target(triple)}_"
    logger.info(f"Passing through properties with prefix '{prefix}'")
    env = {}
    for key, value in properties.items():
        if key.startswith(prefix) and len(key) > len(prefix):
            real_key = key[len(prefix):]
            logger.debug(f"Passing through property '{key}' as '{real_key}={value}'")
            env[real_key] = value
    return env


def wrapper_paths(build_root, host):
    """Linker wrapper, its Python script and the test runner under the build root."""
    ext = ".bat" if host.is_windows else ".sh"
    return {
        "linker": os.path.join(build_root, "linker-wrapper", f"linker-wrapper{ext}"),
        "linker_py": os.path.join(build_root, "linker-wrapper", "linker-wrapper.py"),
        # There is no Windows runner yet, the .bat path is set but never exists.
        "runner": os.path.join(build_root, "runner", f"run-on-android{ext}"),
    }


def cross_compile_env(toolchain, settings, properties, host, ndk_locator=None, ndk_major=None):
    """Environment that points cargo and cc-rs at the Android toolchain."""
    target = env_target(toolchain.target)
    scripts = wrapper_paths(settings.build_root, host)
    paths = resolve_toolchain(
        toolchain,
        settings.api_level_for(toolchain.platform),
        host=host,
        ndk_locator=ndk_locator,
        toolchain_directory=settings.toolchain_directory,
        ndk_major=ndk_major,
    )

    env = {
        f"CARGO_TARGET_{target}_LINKER": scripts["linker"],
        f"CARGO_TARGET_{target}_RUNNER": scripts["runner"],
        # cc-rs reads the raw, hyphenated triple: CC_i686-linux-android.
        f"CC_{toolchain.target}": paths.cc,
        f"CXX_{toolchain.target}": paths.cxx,
        f"AR_{toolchain.target}": paths.ar,
    }

    # clang-sys (bindgen) must not pick up the host clang and headers.
    configure_clang_sys = settings.auto_configure_clang_sys
    if configure_clang_sys is None:
        configure_clang_sys = get_flag_property(
            properties, CLANG_SYS_PROPERTY, CLANG_SYS_ENV,
            toolchain.type is not ToolchainType.DESKTOP,
        )
    if configure_clang_sys:
        env["CLANG_PATH"] = paths.cc

    env["CARGODROID_PYTHON_COMMAND"] = settings.python_command
    env["CARGODROID_LINKER_WRAPPER_PY"] = scripts["linker_py"]
    env["CARGODROID_CC"] = paths.cc
    env["CARGODROID_CC_LINK_ARG"] = f"-Wl,-soname,lib{settings.libname}.so"
    return env


def build_cargo_command(request, settings, default_triple, *, host: Optional[HostPlatform] = None,
                        ndk_locator=None, ndk_major=None):
    """
    Assemble the cargo command line and environment for one invocation.

    The result only depends on the arguments. `default_triple` is the host
    triple reported by rustc, or None when detection failed.

    Raises:
        ConfigurationError: If the profile is not 'dev' or 'release'
        ToolchainResolutionError: If a prebuilt toolchain's NDK cannot be found
    """
    host = host or detect_host()
    toolchain = request.toolchain
    argv = [settings.cargo_command]
    env = {}

    if request.channel:
        argv.append(request.channel if request.channel.startswith("+") else f"+{request.channel}")

    argv.append(request.command)

    # An explicit setting wins, otherwise follow the console log level.
    verbose = request.verbose
    if verbose is None:
        verbose = logger.is_enabled(INFO)
    if verbose:
        argv.append("--verbose")

    argv.extend(encode_features(request.features))

    # TODO: switch to --profile once all supported cargo versions accept it.
    if validate_profile(request.profile) == "release":
        argv.append("--release")

    # Without --target cargo builds for the host triple.
    if toolchain.target != default_triple:
        argv.append(f"--target={toolchain.target}")

    env.update(passthrough_env(request.properties, toolchain.target))

    if toolchain.type is not ToolchainType.DESKTOP:
        env.update(cross_compile_env(toolchain, settings, request.properties, host, ndk_locator, ndk_major))

    argv.extend(request.extra_args)

    if settings.exec_hook is not None:
        settings.exec_hook(argv, env, toolchain)

    return CargoCommand(argv=argv, env=env, cwd=request.working_dir)
