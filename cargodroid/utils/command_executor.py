import enum
import os
import subprocess
from dataclasses import dataclass
from typing import Optional
from ..cli_logger import logger


class OutputPolicy(enum.Enum):
    STREAM = "stream"
    CAPTURE = "capture"


@dataclass(frozen=True)
class ExecutionResult:
    returncode: int
    output: Optional[str] = None


def run_command(command, env=None, cwd=None, output=OutputPolicy.STREAM):
    """
    Executes a command and waits for it to exit.

    Args:
        command (list): The command to execute as a list of strings.
        env (dict, optional): Variables laid over the current environment.
            Keys given here win over inherited ones.
        cwd (str, optional): The working directory for the command.
        output (OutputPolicy): STREAM echoes every output line live through
            the logger; CAPTURE collects stdout silently.

    Returns:
        ExecutionResult. `output` is the captured stdout for CAPTURE and
        None for STREAM. A command that cannot be started (missing, not
        executable, bad working directory) yields returncode -1.
    """
    full_env = os.environ.copy()
    if env:
        full_env.update(env)

    logger.debug(f"Running: {' '.join(command)}" + (f" (in {cwd})" if cwd else ""))
    try:
        if output is OutputPolicy.STREAM:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                bufsize=1,
                universal_newlines=True,
                env=full_env,
                cwd=cwd
            )
            for line in process.stdout:
                logger.process_output(line.rstrip("\n"))
            process.wait()
            return ExecutionResult(process.returncode)

        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            env=full_env,
            check=False,
            cwd=cwd
        )
        return ExecutionResult(result.returncode, result.stdout)

    except OSError as e:
        message = f"Could not run {command[0]}: {e.strerror or e}"
        if e.filename and e.filename != command[0]:
            message += f" ({e.filename})"
        if output is OutputPolicy.CAPTURE:
            # The caller reports a failed probe.
            logger.debug(message)
            return ExecutionResult(-1, "")
        logger.error(message)
        return ExecutionResult(-1)
