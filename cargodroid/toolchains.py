"""
Toolchain descriptions and compiler path resolution.

A Toolchain names one Rust target and knows how the matching C compiler,
C++ compiler and archiver are laid out inside a toolchain directory. The
toolchain directory itself depends on the toolchain type:

- DESKTOP: a configured fixed directory (host compilers)
- ANDROID_PREBUILT: <ndk>/toolchains/llvm/prebuilt/<host tag>
- ANDROID_GENERATED: a configured standalone toolchain directory, verbatim
"""

import enum
import os
import re
from dataclasses import dataclass
from typing import Callable, Optional

from .cli_logger import logger
from .errors import ConfigurationError, ToolchainResolutionError
from .host import HostPlatform, host_tag

# NDK r23 dropped the GNU binutils, `llvm-ar` is the only archiver left.
LLVM_AR_NDK_MAJOR = 23


class ToolchainType(enum.Enum):
    DESKTOP = "desktop"
    ANDROID_PREBUILT = "android-prebuilt"
    ANDROID_GENERATED = "android-generated"


@dataclass(frozen=True)
class Toolchain:
    """
    One compilation target.

    Attributes:
        platform: Name used in configuration, e.g. 'arm64' or 'linux-x86-64'
        type: Where the toolchain comes from
        target: Rust target triple, e.g. 'aarch64-linux-android'
        compiler_triple: Prefix of the clang driver names
        binutils_triple: Prefix of the (pre r23) binutils names
        folder: Output folder for this target's libraries
    """

    platform: str
    type: ToolchainType
    target: str
    compiler_triple: str
    binutils_triple: str
    folder: str

    def _bin_dir(self, api_level):
        if self.type is ToolchainType.ANDROID_GENERATED:
            return os.path.join(f"{self.platform}-{api_level}", "bin")
        return "bin"

    def _clang(self, api_level, host, suffix):
        ext = ".cmd" if host.is_windows else ""
        if self.type is ToolchainType.DESKTOP:
            return os.path.join("bin", f"clang{suffix}")
        if self.type is ToolchainType.ANDROID_PREBUILT:
            # The prebuilt toolchain ships one versioned driver per API level.
            name = f"{self.compiler_triple}{api_level}-clang{suffix}{ext}"
        else:
            name = f"{self.compiler_triple}-clang{suffix}{ext}"
        return os.path.join(self._bin_dir(api_level), name)

    def cc(self, api_level, host):
        return self._clang(api_level, host, "")

    def cxx(self, api_level, host):
        return self._clang(api_level, host, "++")

    def ar(self, api_level, ndk_major=None):
        if self.type is ToolchainType.DESKTOP or (ndk_major is not None and ndk_major >= LLVM_AR_NDK_MAJOR):
            return os.path.join("bin", "llvm-ar")
        return os.path.join(self._bin_dir(api_level), f"{self.binutils_triple}-ar")


@dataclass(frozen=True)
class ToolchainPaths:
    cc: str
    cxx: str
    ar: str


def _android(platform, target, compiler_triple, binutils_triple, abi):
    return [
        Toolchain(platform, ToolchainType.ANDROID_PREBUILT, target, compiler_triple, binutils_triple, f"android/{abi}"),
        Toolchain(platform, ToolchainType.ANDROID_GENERATED, target, binutils_triple, binutils_triple, f"android/{abi}"),
    ]


TOOLCHAINS = [
    Toolchain("linux-x86-64", ToolchainType.DESKTOP, "x86_64-unknown-linux-gnu", "<compilerTriple>", "<binutilsTriple>", "desktop/linux-x86-64"),
    Toolchain("darwin-x86-64", ToolchainType.DESKTOP, "x86_64-apple-darwin", "<compilerTriple>", "<binutilsTriple>", "desktop/darwin-x86-64"),
    Toolchain("darwin-aarch64", ToolchainType.DESKTOP, "aarch64-apple-darwin", "<compilerTriple>", "<binutilsTriple>", "desktop/darwin-aarch64"),
    Toolchain("win32-x86-64-msvc", ToolchainType.DESKTOP, "x86_64-pc-windows-msvc", "<compilerTriple>", "<binutilsTriple>", "desktop/win32-x86-64"),
    Toolchain("win32-x86-64-gnu", ToolchainType.DESKTOP, "x86_64-pc-windows-gnu", "<compilerTriple>", "<binutilsTriple>", "desktop/win32-x86-64"),
    *_android("arm", "armv7-linux-androideabi", "armv7a-linux-androideabi", "arm-linux-androideabi", "armeabi-v7a"),
    *_android("arm64", "aarch64-linux-android", "aarch64-linux-android", "aarch64-linux-android", "arm64-v8a"),
    *_android("x86", "i686-linux-android", "i686-linux-android", "i686-linux-android", "x86"),
    *_android("x86_64", "x86_64-linux-android", "x86_64-linux-android", "x86_64-linux-android", "x86_64"),
]


def find_toolchain(platform, use_prebuilt=True):
    """
    Look up the toolchain for a configured target name.

    Android targets come in a prebuilt and a generated flavour; `use_prebuilt`
    picks one of them.
    """
    skip = ToolchainType.ANDROID_GENERATED if use_prebuilt else ToolchainType.ANDROID_PREBUILT
    for toolchain in TOOLCHAINS:
        if toolchain.platform == platform and toolchain.type is not skip:
            return toolchain
    known = sorted({t.platform for t in TOOLCHAINS})
    raise ConfigurationError(f"Unknown target '{platform}'. Known targets: {', '.join(known)}")


# -------------------- NDK discovery --------------------

def _version_key(name):
    return [int(part) if part.isdigit() else part for part in re.split(r"[.\-]", name)]


def ndk_candidates(ndk_directory=None, ndk_version=None, environ=None):
    """List the directories that may hold the NDK, most preferred first."""
    environ = os.environ if environ is None else environ
    candidates = []
    if ndk_directory:
        candidates.append(ndk_directory)
    for var in ("ANDROID_NDK_HOME", "ANDROID_NDK_ROOT"):
        if environ.get(var):
            candidates.append(environ[var])

    sdk_dir = environ.get("ANDROID_HOME") or environ.get("ANDROID_SDK_ROOT")
    if sdk_dir:
        ndk_parent = os.path.join(sdk_dir, "ndk")
        if ndk_version:
            candidates.append(os.path.join(ndk_parent, str(ndk_version)))
        elif os.path.isdir(ndk_parent):
            versions = sorted(os.listdir(ndk_parent), key=_version_key, reverse=True)
            candidates.extend(os.path.join(ndk_parent, v) for v in versions)
        candidates.append(os.path.join(sdk_dir, "ndk-bundle"))
    return candidates


def locate_ndk(ndk_directory=None, ndk_version=None, environ=None):
    """Return the first existing NDK directory or raise ToolchainResolutionError."""
    candidates = ndk_candidates(ndk_directory, ndk_version, environ)
    for candidate in candidates:
        if os.path.isdir(candidate):
            logger.info(f"Using Android NDK at {candidate}")
            return os.path.abspath(candidate)
    if not candidates:
        message = ("Android NDK not found. Set 'ndk_directory' in cargodroid.toml "
                   "or the ANDROID_NDK_HOME environment variable.")
    else:
        message = f"Android NDK not found, tried: {', '.join(candidates)}"
    raise ToolchainResolutionError(message, candidates)


def ndk_major_version(ndk_root):
    """Read the NDK major version from source.properties, or None."""
    properties = os.path.join(ndk_root, "source.properties")
    try:
        with open(properties, "r") as f:
            for line in f:
                key, _, value = line.partition("=")
                if key.strip() == "Pkg.Revision":
                    return int(value.strip().split(".")[0])
    except (IOError, ValueError) as e:
        logger.debug(f"Could not read NDK version from {properties}: {e}")
    return None


# -------------------- Resolution --------------------

def resolve_toolchain(
    toolchain: Toolchain,
    api_level: int,
    *,
    host: HostPlatform,
    ndk_locator: Optional[Callable[[], str]] = None,
    toolchain_directory: Optional[str] = None,
    ndk_major: Optional[int] = None,
) -> ToolchainPaths:
    """
    Resolve absolute cc, cxx and ar paths for a toolchain at an API level.

    Args:
        toolchain: Toolchain to resolve
        api_level: Android API level folded into the compiler names
        host: Host platform, picks the prebuilt directory and driver suffix
        ndk_locator: Returns the NDK root; needed for ANDROID_PREBUILT
        toolchain_directory: Directory for DESKTOP and ANDROID_GENERATED
        ndk_major: NDK major version, decides the archiver name.
            Read from the NDK when not given.

    Raises:
        ToolchainResolutionError: If the NDK root cannot be located
        ConfigurationError: If a required toolchain directory is not configured
    """
    if toolchain.type is ToolchainType.ANDROID_PREBUILT:
        if ndk_locator is None:
            ndk_locator = locate_ndk
        ndk_root = ndk_locator()
        directory = os.path.join(ndk_root, "toolchains", "llvm", "prebuilt", host_tag(host))
        if ndk_major is None:
            ndk_major = ndk_major_version(ndk_root)
            if ndk_major is None:
                ndk_major = LLVM_AR_NDK_MAJOR
    else:
        if not toolchain_directory:
            raise ConfigurationError(
                f"'toolchain_directory' must be set to resolve the {toolchain.type.value} toolchain '{toolchain.platform}'",
                missing=["toolchain_directory"],
            )
        directory = toolchain_directory

    directory = os.path.abspath(directory)
    logger.debug(f"Toolchain directory for {toolchain.platform}: {directory}")
    return ToolchainPaths(
        cc=os.path.join(directory, toolchain.cc(api_level, host)),
        cxx=os.path.join(directory, toolchain.cxx(api_level, host)),
        ar=os.path.join(directory, toolchain.ar(api_level, ndk_major)),
    )
