import functools
from .cli_logger import logger
from .utils.command_executor import run_command, OutputPolicy

# `rustc --version --verbose` prints `key: value` lines; `host` is the
# default target triple.
TRIPLE_PREFIX = "host: "


def detect_default_target_triple(rustc="rustc"):
    """Ask rustc for its default target triple. Returns None if that fails."""
    result = run_command([rustc, "--version", "--verbose"], output=OutputPolicy.CAPTURE)
    if result.returncode != 0:
        logger.warning(f"Failed to get default target triple from {rustc} (exit code: {result.returncode})")
        return None

    for line in result.output.split("\n"):
        if line.startswith(TRIPLE_PREFIX):
            triple = line[len(TRIPLE_PREFIX):].strip()
            logger.info(f"Default rust target triple: {triple}")
            return triple

    logger.warning(f"Failed to parse `{rustc} -Vv` output, no '{TRIPLE_PREFIX.strip()}' line found.")
    return None


@functools.lru_cache(maxsize=None)
def default_target_triple(rustc="rustc"):
    """Memoized detect_default_target_triple, one probe per rustc per process."""
    return detect_default_target_triple(rustc)
