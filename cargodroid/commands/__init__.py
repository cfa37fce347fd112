from .build import build
from .test import test
from .clippy import clippy
from .targets import targets
from .doctor import doctor
from .config import config
from .version import version
from .log import log

__all__ = ["build", "test", "clippy", "targets", "doctor", "config", "version", "log"]
