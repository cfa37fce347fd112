import enum
from dataclasses import dataclass
from typing import Tuple
from .errors import ConfigurationError


class FeatureKind(enum.Enum):
    ALL = "all"
    DEFAULT_AND = "default"
    NO_DEFAULT_BUT = "no_default"


@dataclass(frozen=True)
class FeatureSpec:
    """Cargo feature selection. ALL carries no feature names."""

    kind: FeatureKind = FeatureKind.DEFAULT_AND
    features: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.kind, FeatureKind):
            raise ValueError(f"Unknown feature kind: {self.kind!r}")
        if self.kind is FeatureKind.ALL and self.features:
            raise ValueError("--all-features takes no feature names")

    @classmethod
    def all(cls):
        return cls(FeatureKind.ALL)

    @classmethod
    def default_and(cls, *features):
        return cls(FeatureKind.DEFAULT_AND, _ordered_unique(features))

    @classmethod
    def no_default_but(cls, *features):
        return cls(FeatureKind.NO_DEFAULT_BUT, _ordered_unique(features))


def _ordered_unique(features):
    return tuple(dict.fromkeys(features))


def encode_features(spec):
    """Turn a FeatureSpec into cargo command line flags."""
    # Cargo takes the feature list as one space separated argument.
    if spec.kind is FeatureKind.ALL:
        return ["--all-features"]
    elif spec.kind is FeatureKind.DEFAULT_AND:
        if not spec.features:
            return []
        return ["--features", " ".join(spec.features)]
    elif spec.kind is FeatureKind.NO_DEFAULT_BUT:
        flags = ["--no-default-features"]
        if spec.features:
            flags += ["--features", " ".join(spec.features)]
        return flags
    raise ValueError(f"Unknown feature kind: {spec.kind!r}")


def parse_features(value):
    """
    Build a FeatureSpec from its cargodroid.toml form.

    Accepted forms:
        features = "all"
        features = ["a", "b"]                # default features plus a, b
        features = { default = ["a"] }
        features = { no_default = ["a"] }
    """
    if value is None:
        return FeatureSpec()
    if isinstance(value, str):
        if value == "all":
            return FeatureSpec.all()
        raise ConfigurationError(f"Unknown feature selection '{value}', expected 'all', a list or a table")
    if isinstance(value, (list, tuple)):
        return FeatureSpec.default_and(*_checked_names(value))
    if isinstance(value, dict):
        if len(value) != 1:
            raise ConfigurationError(
                f"Feature table must have exactly one of 'default' or 'no_default', got {sorted(value)}"
            )
        (key, names), = value.items()
        if key == "default":
            return FeatureSpec.default_and(*_checked_names(names))
        if key == "no_default":
            return FeatureSpec.no_default_but(*_checked_names(names))
        raise ConfigurationError(f"Unknown feature table key '{key}', expected 'default' or 'no_default'")
    raise ConfigurationError(f"Invalid feature selection: {value!r}")


def _checked_names(names):
    if isinstance(names, str):
        raise ConfigurationError(f"Feature names must be a list, got '{names}'")
    names = [str(name) for name in names]
    bad = [name for name in names if not name or any(c.isspace() for c in name)]
    if bad:
        raise ConfigurationError(f"Invalid feature names (empty or containing whitespace): {bad}")
    return names
