"""Runs external CLIs (eslint, prettier, tsc, package managers) for the hooks."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from toolhooks.errors import ToolUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolRun:
    """Outcome of one external tool invocation."""

    argv: tuple[str, ...]
    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.timed_out and self.returncode == 0

    @property
    def output(self) -> str:
        """stdout if the tool wrote any, otherwise stderr."""
        return self.stdout or self.stderr


def run_tool(argv: list[str], cwd: Path, timeout: float) -> ToolRun:
    """Run *argv* in *cwd* without a shell.

    Raises ToolUnavailableError if the executable does not exist.
    A timeout is reported on the returned ToolRun rather than raised.
    """
    logger.debug("Running %s in %s (timeout %.0fs)", " ".join(argv), cwd, timeout)
    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise ToolUnavailableError(argv[0]) from exc
    except subprocess.TimeoutExpired as exc:
        logger.warning("%s timed out after %.0fs", argv[0], timeout)
        return ToolRun(
            argv=tuple(argv),
            returncode=None,
            stdout=_as_text(exc.stdout),
            stderr=_as_text(exc.stderr),
            timed_out=True,
        )

    return ToolRun(
        argv=tuple(argv),
        returncode=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
    )


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
