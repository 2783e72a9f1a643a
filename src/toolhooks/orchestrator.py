"""Runs the hook pipeline for one agent event and aggregates the verdicts.

Pipeline: check-dependencies, validate-imports and typecheck-after-edit run
concurrently, then lint-after-edit and format-on-edit run in order. The
first blocked verdict wins unless ``stop_on_first_error`` is off, in which
case every hook runs and the blocked verdicts are merged.

Each hook runs as ``python -m toolhooks.hooks.<name>`` with the unchanged
stdin payload. Run as ``python -m toolhooks.orchestrator``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, TextIO

from pydantic import ValidationError

from toolhooks.audit import AuditLogger
from toolhooks.config import HooksConfig, ToolhooksSettings, load_config, resolve_project_root
from toolhooks.errors import HookInputError
from toolhooks.hooks import HOOKS, HookSpec
from toolhooks.hooks.base import parse_event
from toolhooks.logging_config import configure_logging
from toolhooks.models import HookEvent, Verdict

logger = logging.getLogger(__name__)

PARALLEL_GROUP = ("check-dependencies", "validate-imports", "typecheck-after-edit")
SEQUENTIAL_GROUP = ("lint-after-edit", "format-on-edit")

DEFAULT_HOOK_TIMEOUT = 10.0
# Headroom on top of a hook's own tool timeout for interpreter start-up
HOOK_TIMEOUT_MARGIN = 10.0


@dataclass(frozen=True)
class HookProcessResult:
    returncode: int
    stdout: str
    stderr: str


@dataclass(frozen=True)
class HookOutcome:
    hook: str
    verdict: Verdict | None
    duration_ms: int
    note: str = ""

    @property
    def is_blocked(self) -> bool:
        return self.verdict is not None and self.verdict.is_blocked


HookLauncher = Callable[[HookSpec, str, float], Awaitable[HookProcessResult]]


async def launch_hook(spec: HookSpec, payload: str, timeout: float) -> HookProcessResult:
    """Run one hook module in a child interpreter, feeding *payload* on stdin."""
    proc = await asyncio.create_subprocess_exec(
        sys.executable, "-m", spec.module,
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(payload.encode("utf-8")), timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise
    return HookProcessResult(
        returncode=proc.returncode if proc.returncode is not None else 1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def hook_timeout(spec: HookSpec, config: HooksConfig) -> float:
    section = getattr(config, spec.config_section)
    return getattr(section, "timeout", DEFAULT_HOOK_TIMEOUT) + HOOK_TIMEOUT_MARGIN


def interpret_result(name: str, result: HookProcessResult) -> tuple[Verdict | None, str]:
    """Turn a finished child into a verdict.

    Returns ``(None, reason)`` when the output carries no usable verdict and
    the hook exited cleanly; such hooks count as passed.
    """
    lines = [line for line in result.stdout.strip().splitlines() if line.strip()]
    if lines:
        try:
            return Verdict.model_validate(json.loads(lines[-1])), ""
        except (json.JSONDecodeError, ValidationError):
            pass

    if result.returncode != 0:
        raw = result.stdout.strip() or result.stderr.strip()
        return Verdict.blocked(f"❌ Error in hook {name}:\n{raw}"), ""
    return None, "hook produced no parseable verdict"


class Orchestrator:
    """Sequences the hook catalog for one payload."""

    def __init__(
        self,
        config: HooksConfig,
        *,
        launcher: HookLauncher = launch_hook,
        audit: AuditLogger | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self._config = config
        self._launcher = launcher
        self._audit = audit
        self._stderr = stderr or sys.stderr

    def _enabled(self, names: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(name for name in names if HOOKS[name].enabled(self._config))

    def plan(self) -> list[tuple[tuple[str, ...], bool]]:
        """Groups to run as ``(hook names, run concurrently)`` pairs."""
        if self._config.orchestrator.parallel:
            groups = [
                (self._enabled(PARALLEL_GROUP), True),
                (self._enabled(SEQUENTIAL_GROUP), False),
            ]
        else:
            groups = [(self._enabled(PARALLEL_GROUP + SEQUENTIAL_GROUP), False)]
        return [(names, concurrent) for names, concurrent in groups if names]

    async def run(self, payload: str, event: HookEvent | None = None) -> Verdict:
        stop_early = self._config.orchestrator.stop_on_first_error
        blocked: list[HookOutcome] = []

        for names, concurrent in self.plan():
            if concurrent:
                outcomes = list(await asyncio.gather(*(self._run_one(n, payload) for n in names)))
            else:
                outcomes = []
                for name in names:
                    outcome = await self._run_one(name, payload)
                    outcomes.append(outcome)
                    if outcome.is_blocked and stop_early:
                        break

            for outcome in outcomes:
                self._record(outcome, event)
                if outcome.is_blocked:
                    blocked.append(outcome)
                elif outcome.verdict is not None and outcome.verdict.message:
                    print(outcome.verdict.message, file=self._stderr)
            if blocked and stop_early:
                return self._finish(blocked[0].verdict, event)

        if not blocked:
            return self._finish(Verdict.ok(), event)
        if len(blocked) == 1:
            return self._finish(blocked[0].verdict, event)
        merged = Verdict.blocked(
            "\n\n".join(o.verdict.message or o.hook for o in blocked),
            details={
                "blocked_hooks": [o.hook for o in blocked],
                "results": {o.hook: o.verdict.details for o in blocked if o.verdict.details},
            },
        )
        return self._finish(merged, event)

    async def _run_one(self, name: str, payload: str) -> HookOutcome:
        spec = HOOKS[name]
        started = time.perf_counter()
        try:
            result = await self._launcher(spec, payload, hook_timeout(spec, self._config))
        except asyncio.TimeoutError:
            verdict, note = None, "hook timed out"
        except OSError as exc:
            verdict, note = None, f"hook could not be started: {exc}"
        else:
            verdict, note = interpret_result(name, result)

        duration_ms = int((time.perf_counter() - started) * 1000)
        if note:
            logger.warning("Treating %s as passed: %s", name, note)
        if self._config.orchestrator.verbose:
            status = verdict.status if verdict is not None else "skipped"
            print(f"[{name}] {status} ({duration_ms}ms)", file=self._stderr)
        return HookOutcome(hook=name, verdict=verdict, duration_ms=duration_ms, note=note)

    def _record(self, outcome: HookOutcome, event: HookEvent | None) -> None:
        verdict = outcome.verdict
        self._audit_log(
            outcome.hook,
            verdict.status if verdict is not None else "ok",
            event,
            message=(verdict.message if verdict is not None else outcome.note) or "",
            duration_ms=outcome.duration_ms,
        )

    def _finish(self, verdict: Verdict, event: HookEvent | None) -> Verdict:
        self._audit_log("orchestrator", verdict.status, event, message=verdict.message or "")
        return verdict

    def _audit_log(
        self,
        hook: str,
        status: str,
        event: HookEvent | None,
        *,
        message: str,
        duration_ms: int | None = None,
    ) -> None:
        if self._audit is None:
            return
        try:
            self._audit.log(
                hook,
                str(status),
                event=event.event if event else "",
                tool_name=event.tool_name if event else "",
                file_path=event.file_path if event else "",
                message=message,
                duration_ms=duration_ms,
            )
        except OSError as exc:
            logger.warning("Failed to write audit entry: %s", exc)


async def orchestrate(
    payload: str,
    *,
    settings: ToolhooksSettings | None = None,
    launcher: HookLauncher = launch_hook,
    stderr: TextIO | None = None,
) -> Verdict:
    """Run the full pipeline for *payload*.

    Unparseable input lets the action through. A failure inside the
    orchestrator itself (for example an unreadable config file) blocks.
    """
    settings = settings or ToolhooksSettings()
    try:
        try:
            event = parse_event(payload)
        except HookInputError as exc:
            logger.warning("Orchestrator input ignored: %s", exc.message)
            return Verdict.ok()

        root: Path = resolve_project_root(event.cwd, settings)
        config = load_config(root, settings)
        audit = AuditLogger.for_project(root) if config.orchestrator.audit else None
        orchestrator = Orchestrator(config, launcher=launcher, audit=audit, stderr=stderr)
        return await orchestrator.run(payload, event)
    except Exception as exc:
        logger.exception("Orchestrator failed")
        return Verdict.blocked(f"❌ Orchestrator error: {exc}")


def main(stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
    settings = ToolhooksSettings()
    configure_logging(settings.log_level, json_output=settings.json_logs)
    payload = (stdin or sys.stdin).read()
    verdict = asyncio.run(orchestrate(payload, settings=settings))
    out = stdout or sys.stdout
    print(verdict.to_json(), file=out)
    out.flush()
    sys.exit(verdict.exit_code)


if __name__ == "__main__":
    main()
