import os
import shutil
import tempfile
import unittest
from unittest.mock import patch
from cargodroid.errors import ConfigurationError, ToolchainResolutionError
from cargodroid.host import HostPlatform, host_tag
from cargodroid.toolchains import (
    ToolchainType, find_toolchain, locate_ndk, ndk_major_version, resolve_toolchain,
)

LINUX = HostPlatform("Linux", "x86_64")
WINDOWS = HostPlatform("Windows", "AMD64")

class TestHostTag(unittest.TestCase):

    def test_host_tags(self):
        cases = [
            (HostPlatform("Windows", "amd64"), "windows-x86_64"),
            (HostPlatform("Windows", "AMD64"), "windows-x86_64"),
            (HostPlatform("Windows", "x86_64"), "windows-x86_64"),
            (HostPlatform("Windows", "x86"), "windows"),
            (HostPlatform("Darwin", "arm64"), "darwin-x86_64"),
            (HostPlatform("Darwin", "x86_64"), "darwin-x86_64"),
            (HostPlatform("Linux", "x86_64"), "linux-x86_64"),
            (HostPlatform("FreeBSD", "amd64"), "linux-x86_64"),
        ]
        for host, expected in cases:
            with self.subTest(host=host):
                self.assertEqual(host_tag(host), expected)


class TestFindToolchain(unittest.TestCase):

    def test_prebuilt_and_generated(self):
        self.assertEqual(find_toolchain("arm64").type, ToolchainType.ANDROID_PREBUILT)
        self.assertEqual(find_toolchain("arm64", use_prebuilt=False).type, ToolchainType.ANDROID_GENERATED)
        self.assertEqual(find_toolchain("arm").target, "armv7-linux-androideabi")

    def test_desktop(self):
        toolchain = find_toolchain("linux-x86-64")
        self.assertEqual(toolchain.type, ToolchainType.DESKTOP)
        self.assertEqual(toolchain.target, "x86_64-unknown-linux-gnu")

    def test_unknown(self):
        with self.assertRaises(ConfigurationError):
            find_toolchain("mips")


@patch('cargodroid.toolchains.logger')
class TestResolveToolchain(unittest.TestCase):

    def test_prebuilt_on_linux(self, mock_logger):
        paths = resolve_toolchain(find_toolchain("arm"), 21, host=LINUX, ndk_locator=lambda: "/ndk", ndk_major=25)
        base = "/ndk/toolchains/llvm/prebuilt/linux-x86_64/bin"
        self.assertEqual(paths.cc, f"{base}/armv7a-linux-androideabi21-clang")
        self.assertEqual(paths.cxx, f"{base}/armv7a-linux-androideabi21-clang++")
        self.assertEqual(paths.ar, f"{base}/llvm-ar")

    def test_prebuilt_on_windows_amd64(self, mock_logger):
        paths = resolve_toolchain(find_toolchain("x86_64"), 26, host=WINDOWS, ndk_locator=lambda: "/ndk", ndk_major=25)
        self.assertIn(os.path.join("prebuilt", "windows-x86_64", "bin"), paths.cc)
        self.assertTrue(paths.cc.endswith("x86_64-linux-android26-clang.cmd"))
        self.assertTrue(paths.cxx.endswith("x86_64-linux-android26-clang++.cmd"))

    def test_old_ndk_uses_binutils_ar(self, mock_logger):
        paths = resolve_toolchain(find_toolchain("arm"), 21, host=LINUX, ndk_locator=lambda: "/ndk", ndk_major=22)
        self.assertEqual(paths.ar, "/ndk/toolchains/llvm/prebuilt/linux-x86_64/bin/arm-linux-androideabi-ar")

    def test_locator_failure_propagates(self, mock_logger):
        def locator():
            raise ToolchainResolutionError("no ndk")
        with self.assertRaises(ToolchainResolutionError):
            resolve_toolchain(find_toolchain("arm64"), 21, host=LINUX, ndk_locator=locator)

    def test_generated_uses_directory_verbatim(self, mock_logger):
        toolchain = find_toolchain("arm64", use_prebuilt=False)
        paths = resolve_toolchain(toolchain, 24, host=LINUX, toolchain_directory="/toolchains")
        self.assertEqual(paths.cc, "/toolchains/arm64-24/bin/aarch64-linux-android-clang")
        self.assertEqual(paths.ar, "/toolchains/arm64-24/bin/aarch64-linux-android-ar")

    def test_desktop_uses_configured_directory(self, mock_logger):
        paths = resolve_toolchain(find_toolchain("linux-x86-64"), 21, host=LINUX, toolchain_directory="/usr/lib/llvm")
        self.assertEqual(paths.cc, "/usr/lib/llvm/bin/clang")
        self.assertEqual(paths.cxx, "/usr/lib/llvm/bin/clang++")
        self.assertEqual(paths.ar, "/usr/lib/llvm/bin/llvm-ar")

    def test_directory_required_for_non_prebuilt(self, mock_logger):
        with self.assertRaises(ConfigurationError):
            resolve_toolchain(find_toolchain("linux-x86-64"), 21, host=LINUX)


@patch('cargodroid.toolchains.logger')
class TestLocateNdk(unittest.TestCase):

    def setUp(self):
        self.root = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.root)

    def _mkdir(self, *parts):
        path = os.path.join(self.root, *parts)
        os.makedirs(path)
        return path

    def test_explicit_directory_wins(self, mock_logger):
        explicit = self._mkdir("explicit")
        env_ndk = self._mkdir("env")
        self.assertEqual(locate_ndk(explicit, environ={"ANDROID_NDK_HOME": env_ndk}), explicit)

    def test_ndk_home(self, mock_logger):
        env_ndk = self._mkdir("env")
        self.assertEqual(locate_ndk(environ={"ANDROID_NDK_HOME": env_ndk}), env_ndk)

    def test_sdk_newest_version(self, mock_logger):
        self._mkdir("sdk", "ndk", "21.4.7075529")
        newest = self._mkdir("sdk", "ndk", "25.2.9519653")
        self._mkdir("sdk", "ndk", "9.0.0")
        sdk = os.path.join(self.root, "sdk")
        self.assertEqual(locate_ndk(environ={"ANDROID_HOME": sdk}), newest)

    def test_sdk_configured_version(self, mock_logger):
        wanted = self._mkdir("sdk", "ndk", "21.4.7075529")
        self._mkdir("sdk", "ndk", "25.2.9519653")
        sdk = os.path.join(self.root, "sdk")
        self.assertEqual(locate_ndk(ndk_version="21.4.7075529", environ={"ANDROID_SDK_ROOT": sdk}), wanted)

    def test_not_found(self, mock_logger):
        missing = os.path.join(self.root, "missing")
        with self.assertRaises(ToolchainResolutionError) as ctx:
            locate_ndk(missing, environ={})
        self.assertEqual(ctx.exception.candidates, [missing])

    def test_nothing_configured(self, mock_logger):
        with self.assertRaises(ToolchainResolutionError):
            locate_ndk(environ={})

    def test_major_version(self, mock_logger):
        with open(os.path.join(self.root, "source.properties"), "w") as f:
            f.write("Pkg.Desc = Android NDK\nPkg.Revision = 25.2.9519653\n")
        self.assertEqual(ndk_major_version(self.root), 25)

    def test_major_version_unknown(self, mock_logger):
        self.assertIsNone(ndk_major_version(self.root))


if __name__ == '__main__':
    unittest.main()
