"""Entry-point plumbing shared by every hook.

A hook is a plain ``evaluate(ctx) -> Verdict`` function. ``run_hook`` reads
the payload from stdin, builds the context, calls the function and writes
the verdict. Anything unexpected lets the action through.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TextIO

from pydantic import ValidationError

from toolhooks.config import HooksConfig, ToolhooksSettings, load_config, resolve_project_root
from toolhooks.errors import ConfigError, HookInputError
from toolhooks.logging_config import bind_hook_context, clear_hook_context, configure_logging
from toolhooks.models import HookEvent, Verdict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HookContext:
    event: HookEvent
    config: HooksConfig
    project_root: Path


Evaluator = Callable[[HookContext], Verdict]


def parse_event(raw: str) -> HookEvent:
    """Parse a stdin payload. Raises HookInputError for empty or malformed input."""
    if not raw.strip():
        raise HookInputError("Hook input is empty")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HookInputError(f"Hook input is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise HookInputError()
    try:
        return HookEvent.model_validate(data)
    except ValidationError as exc:
        raise HookInputError(f"Hook input has unexpected shape: {exc}") from exc


def build_context(event: HookEvent, settings: ToolhooksSettings | None = None) -> HookContext:
    """Resolve project root and config for *event*; a bad config falls back to defaults."""
    settings = settings or ToolhooksSettings()
    root = resolve_project_root(event.cwd, settings)
    try:
        config = load_config(root, settings)
    except ConfigError as exc:
        logger.warning("Failed to load config, using defaults: %s", exc.message)
        config = HooksConfig()
    return HookContext(event=event, config=config, project_root=root)


def evaluate_safely(
    name: str,
    evaluate: Evaluator,
    event: HookEvent,
    settings: ToolhooksSettings | None = None,
) -> Verdict:
    """Build the context and evaluate; any exception lets the action through."""
    try:
        return evaluate(build_context(event, settings))
    except Exception as exc:
        logger.warning("Hook %s failed, allowing action: %s", name, exc, exc_info=True)
        return Verdict.ok(f"⚠️ {name} check failed: {exc}")


def run_hook(
    name: str,
    evaluate: Evaluator,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    settings: ToolhooksSettings | None = None,
) -> int:
    """Run one hook end to end and return its exit code (0 allow, 1 block)."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    settings = settings or ToolhooksSettings()
    configure_logging(settings.log_level, json_output=settings.json_logs)

    try:
        event = parse_event(stdin.read())
    except HookInputError as exc:
        logger.warning("%s: %s", name, exc.message)
        verdict = Verdict.ok()
    else:
        bind_hook_context(name, event.event, event.tool_name)
        try:
            verdict = evaluate_safely(name, evaluate, event, settings)
        finally:
            clear_hook_context()

    print(verdict.to_json(), file=stdout)
    stdout.flush()
    return verdict.exit_code


def hook_main(name: str, evaluate: Evaluator) -> None:
    sys.exit(run_hook(name, evaluate))
