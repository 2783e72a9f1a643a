"""Custom exception classes for toolhooks."""


class ToolhooksError(Exception):
    """Base exception for toolhooks."""

    def __init__(self, code: str, message: str, details=None):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)


class ConfigError(ToolhooksError):
    """Configuration file could not be read or validated."""

    def __init__(self, message: str, details=None):
        super().__init__("CONFIG_ERROR", message, details)


class HookInputError(ToolhooksError):
    """Hook payload on stdin is empty or not a JSON object."""

    def __init__(self, message: str = "Hook input is not a JSON object"):
        super().__init__("HOOK_INPUT_ERROR", message)


class ToolUnavailableError(ToolhooksError):
    """External CLI (eslint, prettier, tsc, package manager) is not installed."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__("TOOL_UNAVAILABLE", f"Executable '{tool}' not found")


class ToolFailedError(ToolhooksError):
    """External CLI exited non-zero without producing output the hook understands."""

    def __init__(self, tool: str, returncode: int | None, output: str = ""):
        self.tool = tool
        self.returncode = returncode
        first_line = output.strip().splitlines()[0] if output.strip() else ""
        message = f"{tool} exited with {returncode} and reported no diagnostics"
        if first_line:
            message += f": {first_line[:200]}"
        super().__init__("TOOL_FAILED", message)
