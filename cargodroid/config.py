import importlib
import os
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

import toml

from .cli_logger import logger
from .errors import ConfigurationError
from .features import FeatureSpec, parse_features

CONFIG_FILE = "cargodroid.toml"

# Environment variables with this prefix become properties, like -P on the command line.
PROPERTY_ENV_PREFIX = "CARGODROID_PROP_"

PROFILES = ("dev", "release")

def load_config(path="."):
    config_path = os.path.join(path, CONFIG_FILE)
    logger.info(f"Loading configuration from {config_path}")
    if os.path.exists(config_path):
        try:
            with open(config_path, "r") as f:
                return toml.load(f)
        except toml.TomlDecodeError as e:
            logger.error(f"Error decoding TOML file at {config_path}: {e}")
            logger.lifecycle("Please check the file's format for syntax errors.")
        except IOError as e:
            logger.error(f"Error reading configuration file at {config_path}: {e}")
            logger.lifecycle("Please check file permissions.")
    return {}

def save_config(config, path="."):
    config_path = os.path.join(path, CONFIG_FILE)
    logger.info(f"Saving configuration to {config_path}")
    try:
        with open(config_path, "w") as f:
            toml.dump(config, f)
        return True
    except IOError as e:
        logger.error(f"Error saving configuration to {config_path}: {e}")
        logger.lifecycle("Please check file permissions and ensure the directory is writable.")
        return False


@dataclass(frozen=True)
class CargoSettings:
    """Validated contents of the [cargo] table."""

    project_dir: str
    module: str
    libname: str
    targets: Tuple[str, ...]
    profile: str = "dev"
    api_level: int = 21
    api_levels: Dict[str, int] = field(default_factory=dict)
    cargo_command: str = "cargo"
    rustc_command: str = "rustc"
    python_command: str = "python"
    rustup_channel: str = ""
    verbose: Optional[bool] = None
    features: FeatureSpec = field(default_factory=FeatureSpec)
    ndk_directory: Optional[str] = None
    ndk_version: Optional[str] = None
    toolchain_directory: Optional[str] = None
    build_directory: str = "build"
    extra_build_arguments: Tuple[str, ...] = ()
    extra_test_arguments: Tuple[str, ...] = ()
    extra_clippy_arguments: Tuple[str, ...] = ()
    auto_configure_clang_sys: Optional[bool] = None
    exec_hook: Optional[Callable] = None
    properties: Dict[str, str] = field(default_factory=dict)

    @property
    def module_dir(self):
        return os.path.normpath(os.path.join(self.project_dir, self.module))

    @property
    def build_root(self):
        return os.path.normpath(os.path.join(self.project_dir, self.build_directory))

    @property
    def use_prebuilt(self):
        return not self.toolchain_directory

    def api_level_for(self, platform):
        return int(self.api_levels.get(platform, self.api_level))


def validate_profile(profile):
    if profile not in PROFILES:
        raise ConfigurationError(f"Profile may only be 'dev' or 'release', got '{profile}'")
    return profile


def load_exec_hook(spec):
    """Import a finalize hook given as 'package.module:function'."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"'exec' must look like 'module:function', got '{spec}'")
    try:
        hook = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Could not load exec hook '{spec}': {e}")
    if not callable(hook):
        raise ConfigurationError(f"Exec hook '{spec}' is not callable")
    return hook


def _string_list(cargo, key, problems):
    value = cargo.get(key, [])
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        problems.append(f"'{key}' must be a list of strings")
        return ()
    return tuple(str(v) for v in value)


def _api_level(value, name, problems):
    if not isinstance(value, bool):
        try:
            level = int(value)
        except (TypeError, ValueError):
            level = None
        if level is not None and level > 0:
            return level
    problems.append(f"'{name}' must be a positive integer API level, got {value!r}")
    return None


def settings_from_config(conf, project_dir=".", environ=None):
    """
    Validate a loaded configuration and build CargoSettings from it.

    Every problem is collected first and reported in one ConfigurationError,
    missing required keys are listed in its `missing` attribute.
    """
    cargo = conf.get("cargo")
    if not isinstance(cargo, dict):
        raise ConfigurationError(
            f"No [cargo] table found in {CONFIG_FILE}",
            missing=["module", "libname", "targets"],
        )

    missing = [key for key in ("module", "libname", "targets") if not cargo.get(key)]
    problems = []

    targets = cargo.get("targets") or []
    if isinstance(targets, str):
        targets = [targets]

    profile = cargo.get("profile", "dev")
    if profile not in PROFILES:
        problems.append(f"Profile may only be 'dev' or 'release', got '{profile}'")

    api_levels = cargo.get("api_levels", {})
    if not isinstance(api_levels, dict):
        problems.append("'api_levels' must be a table of target name to API level")
        api_levels = {}

    api_level = _api_level(cargo.get("api_level", 21), "api_level", problems)
    api_levels = {
        name: _api_level(level, f"api_levels.{name}", problems)
        for name, level in api_levels.items()
    }

    verbose = cargo.get("verbose")
    if verbose is not None and not isinstance(verbose, bool):
        problems.append("'verbose' must be true or false")

    features = FeatureSpec()
    try:
        features = parse_features(cargo.get("features"))
    except ConfigurationError as e:
        problems.append(e.message)

    exec_hook = None
    if cargo.get("exec"):
        try:
            exec_hook = load_exec_hook(cargo["exec"])
        except ConfigurationError as e:
            problems.append(e.message)

    extra = {
        key: _string_list(cargo, key, problems)
        for key in ("extra_build_arguments", "extra_test_arguments", "extra_clippy_arguments")
    }

    if missing or problems:
        lines = []
        if missing:
            lines.append(f"Missing required configuration in [cargo]: {', '.join(missing)}")
        lines.extend(problems)
        raise ConfigurationError("\n".join(lines), missing=missing)

    return CargoSettings(
        project_dir=os.path.abspath(project_dir),
        module=cargo["module"],
        libname=cargo["libname"],
        targets=tuple(targets),
        profile=profile,
        api_level=api_level,
        api_levels=api_levels,
        cargo_command=cargo.get("cargo_command", "cargo"),
        rustc_command=cargo.get("rustc_command", "rustc"),
        python_command=cargo.get("python_command", "python"),
        rustup_channel=cargo.get("rustup_channel", ""),
        verbose=verbose,
        features=features,
        ndk_directory=cargo.get("ndk_directory"),
        ndk_version=cargo.get("ndk_version"),
        toolchain_directory=cargo.get("toolchain_directory"),
        build_directory=cargo.get("build_directory", "build"),
        auto_configure_clang_sys=cargo.get("auto_configure_clang_sys"),
        exec_hook=exec_hook,
        properties=collect_properties(conf, environ),
        **extra,
    )


def load_settings(path=".", environ=None):
    """Load cargodroid.toml from `path` and validate it."""
    conf = load_config(path=path)
    if not conf:
        raise ConfigurationError(f"No {CONFIG_FILE} found in {os.path.abspath(path)}")
    return settings_from_config(conf, project_dir=path, environ=environ)


def collect_properties(conf, environ=None, overrides=None):
    """
    Gather properties from [properties], CARGODROID_PROP_* environment
    variables and explicit overrides, later sources winning.
    """
    environ = os.environ if environ is None else environ
    properties = {str(k): str(v) for k, v in conf.get("properties", {}).items()}
    for key, value in environ.items():
        if key.startswith(PROPERTY_ENV_PREFIX) and len(key) > len(PROPERTY_ENV_PREFIX):
            properties[key[len(PROPERTY_ENV_PREFIX):]] = value
    if overrides:
        properties.update(overrides)
    return properties


def get_flag_property(properties, name, env_name, default, environ=None):
    """
    Read a boolean switch from a property, falling back to an environment
    variable and then to `default`.
    """
    environ = os.environ if environ is None else environ
    value = properties.get(name)
    if value is None:
        value = environ.get(env_name)
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")
