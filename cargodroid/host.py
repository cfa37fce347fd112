"""
Host platform detection.

Toolchain resolution only needs the host OS family and CPU architecture. They
are wrapped in HostPlatform so callers (and tests) can pass any host in.
"""

import platform
from dataclasses import dataclass


@dataclass(frozen=True)
class HostPlatform:
    """
    Host OS and architecture as reported by the platform module.

    Attributes:
        system: OS name, e.g. 'Linux', 'Darwin', 'Windows'
        machine: CPU architecture, e.g. 'x86_64', 'AMD64', 'arm64'
    """

    system: str
    machine: str

    @property
    def is_windows(self) -> bool:
        return self.system.lower().startswith("windows")

    @property
    def is_macos(self) -> bool:
        return self.system.lower() in ("darwin", "macos", "mac os x")


def detect_host() -> HostPlatform:
    """Return the HostPlatform of the running interpreter."""
    return HostPlatform(system=platform.system(), machine=platform.machine())


def host_tag(host: HostPlatform) -> str:
    """
    Name of the NDK prebuilt toolchain directory for this host.

    Example:
        >>> host_tag(HostPlatform('Windows', 'AMD64'))
        'windows-x86_64'
    """
    if host.is_windows:
        if host.machine.lower() in ("x86_64", "amd64"):
            return "windows-x86_64"
        return "windows"
    if host.is_macos:
        return "darwin-x86_64"
    return "linux-x86_64"
