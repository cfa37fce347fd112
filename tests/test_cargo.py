import unittest
from unittest.mock import patch
from cargodroid import cargo
from cargodroid.config import CargoSettings
from cargodroid.errors import BuildProcessFailure, ConfigurationError, ToolchainResolutionError
from cargodroid.features import FeatureSpec
from cargodroid.host import HostPlatform
from cargodroid.toolchains import find_toolchain
from cargodroid.utils.command_executor import ExecutionResult, OutputPolicy

LINUX = HostPlatform("Linux", "x86_64")

@patch('cargodroid.cargo.logger')
@patch('cargodroid.cargo.install_wrapper_scripts')
@patch('cargodroid.cargo.ndk_major_version', return_value=25)
@patch('cargodroid.cargo.locate_ndk', return_value="/ndk")
@patch('cargodroid.cargo.default_target_triple', return_value="x86_64-unknown-linux-gnu")
@patch('cargodroid.cargo.run_command', return_value=ExecutionResult(0))
class TestRunCargo(unittest.TestCase):

    def setUp(self):
        self.settings = CargoSettings(
            project_dir="/proj",
            module="rust",
            libname="mylib",
            targets=("arm64", "linux-x86-64"),
            profile="release",
            verbose=False,
            extra_build_arguments=("--locked",),
            extra_test_arguments=("--", "--nocapture"),
            properties={"TARGET_AARCH64_LINUX_ANDROID_FOO": "bar"},
        )

    def test_build_android(self, mock_run, mock_triple, mock_locate, mock_major, mock_install, mock_logger):
        command = cargo.cargo_build(self.settings, find_toolchain("arm64"), host=LINUX)

        self.assertEqual(command.argv, ["cargo", "build", "--release", "--target=aarch64-linux-android", "--locked"])
        self.assertEqual(command.env["FOO"], "bar")
        self.assertEqual(command.cwd, "/proj/rust")
        mock_locate.assert_called_once_with(None, None)
        mock_triple.assert_called_once_with("rustc")
        mock_install.assert_called_once_with("/proj/build")
        mock_run.assert_called_once_with(command.argv, env=command.env, cwd="/proj/rust", output=OutputPolicy.STREAM)

    def test_desktop_skips_ndk_and_wrappers(self, mock_run, mock_triple, mock_locate, mock_major, mock_install, mock_logger):
        command = cargo.cargo_test(self.settings, find_toolchain("linux-x86-64"), profile="dev", host=LINUX)

        self.assertEqual(command.argv, ["cargo", "test", "--", "--nocapture"])
        mock_locate.assert_not_called()
        mock_install.assert_not_called()

    def test_clippy_with_overrides(self, mock_run, mock_triple, mock_locate, mock_major, mock_install, mock_logger):
        command = cargo.cargo_clippy(
            self.settings, find_toolchain("linux-x86-64"), features=FeatureSpec.all(),
            extra_args=["--", "-D", "warnings"], channel="nightly", host=LINUX,
        )
        self.assertEqual(command.argv, ["cargo", "+nightly", "clippy", "--all-features", "--release",
                                        "--", "-D", "warnings"])

    def test_failure_raises(self, mock_run, mock_triple, mock_locate, mock_major, mock_install, mock_logger):
        mock_run.return_value = ExecutionResult(101)
        with self.assertRaises(BuildProcessFailure) as ctx:
            cargo.cargo_build(self.settings, find_toolchain("linux-x86-64"), host=LINUX)
        self.assertEqual(ctx.exception.returncode, 101)
        self.assertEqual(ctx.exception.exit_code, 101)
        self.assertEqual(ctx.exception.argv[:2], ["cargo", "build"])

    def test_invalid_profile_spawns_nothing(self, mock_run, mock_triple, mock_locate, mock_major, mock_install, mock_logger):
        with self.assertRaises(ConfigurationError):
            cargo.cargo_build(self.settings, find_toolchain("arm64"), profile="staging", host=LINUX)
        mock_triple.assert_not_called()
        mock_run.assert_not_called()

    def test_missing_ndk_spawns_nothing(self, mock_run, mock_triple, mock_locate, mock_major, mock_install, mock_logger):
        mock_locate.side_effect = ToolchainResolutionError("no ndk")
        with self.assertRaises(ToolchainResolutionError):
            cargo.cargo_build(self.settings, find_toolchain("arm64"), host=LINUX)
        mock_triple.assert_not_called()
        mock_run.assert_not_called()

    def test_dry_run(self, mock_run, mock_triple, mock_locate, mock_major, mock_install, mock_logger):
        command = cargo.cargo_build(self.settings, find_toolchain("arm64"), host=LINUX, dry_run=True)
        self.assertIn("CC_aarch64-linux-android", command.env)
        mock_run.assert_not_called()
        mock_install.assert_not_called()

    def test_run_for_targets(self, mock_run, mock_triple, mock_locate, mock_major, mock_install, mock_logger):
        commands = cargo.run_for_targets("build", self.settings, host=LINUX)
        self.assertEqual([c.argv[-2] for c in commands], ["--target=aarch64-linux-android", "--release"])
        self.assertEqual(mock_run.call_count, 2)

    def test_run_for_targets_stops_at_first_failure(self, mock_run, mock_triple, mock_locate, mock_major, mock_install, mock_logger):
        mock_run.return_value = ExecutionResult(1)
        with self.assertRaises(BuildProcessFailure):
            cargo.run_for_targets("build", self.settings, host=LINUX)
        self.assertEqual(mock_run.call_count, 1)

    def test_run_for_targets_rejects_unknown_target_first(self, mock_run, mock_triple, mock_locate, mock_major, mock_install, mock_logger):
        with self.assertRaises(ConfigurationError):
            cargo.run_for_targets("build", self.settings, targets=["arm64", "mips"], host=LINUX)
        mock_run.assert_not_called()


if __name__ == '__main__':
    unittest.main()
