from .command_executor import run_command, OutputPolicy, ExecutionResult
