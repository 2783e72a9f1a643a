"""Type-checks an edited TypeScript file with ``tsc`` and blocks on its errors.

Errors reported for other files (dependencies of the edit) are counted but
do not block. Results are cached per file content for an hour.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from toolhooks.cache import TsConfigCache, TypeCheckResultsCache
from toolhooks.errors import ToolFailedError, ToolUnavailableError
from toolhooks.hooks.base import HookContext, hook_main
from toolhooks.models import Verdict
from toolhooks.runner import run_tool
from toolhooks.shared import (
    detect_package_manager,
    is_typescript_file,
    normalize_path,
    package_exec,
    resolve_in_project,
)

logger = logging.getLogger(__name__)

NAME = "typecheck-after-edit"

TSC_ERROR_RE = re.compile(r"^(.+)\((\d+),(\d+)\):\s+(error\s+TS\d+):\s+(.+)$")
MAX_LISTED_DEPENDENCY_ERRORS = 10


@dataclass
class TypeCheckResult:
    success: bool
    errors: list[dict] = field(default_factory=list)
    dependency_errors: list[dict] = field(default_factory=list)


def parse_tsc_output(output: str) -> list[dict]:
    errors = []
    for line in output.splitlines():
        match = TSC_ERROR_RE.match(line.strip())
        if not match:
            continue
        error_file, error_line, error_col, error_code, error_msg = match.groups()
        errors.append({
            "file": error_file.replace("\\", "/"),
            "line": int(error_line),
            "column": int(error_col),
            "code": error_code,
            "message": error_msg,
        })
    return errors


def is_same_file(reported: str, target: Path, project_root: Path) -> bool:
    """tsc reports paths relative to its cwd; compare both sides as absolute paths."""
    reported_path = Path(reported)
    if not reported_path.is_absolute():
        reported_path = project_root / reported_path
    return normalize_path(str(reported_path)) == normalize_path(str(target))


def run_typecheck(ctx: HookContext, target: Path, config_path: Path) -> TypeCheckResult:
    ts = ctx.config.typescript
    argv = package_exec(detect_package_manager(ctx.project_root), "tsc") + ["--noEmit"]
    if ts.skip_lib_check:
        argv.append("--skipLibCheck")
    argv += ["--incremental", "--project", str(config_path)]

    run = run_tool(argv, ctx.project_root, ts.timeout)
    if run.timed_out:
        raise TimeoutError(f"tsc did not finish within {ts.timeout:.0f}s")
    if run.succeeded:
        return TypeCheckResult(success=True)

    all_errors = parse_tsc_output(run.stdout + "\n" + run.stderr)
    if not all_errors:
        raise ToolFailedError("tsc", run.returncode, run.output)
    relevant = [e for e in all_errors if is_same_file(e["file"], target, ctx.project_root)]
    others = [e for e in all_errors if e not in relevant]
    return TypeCheckResult(success=not relevant, errors=relevant, dependency_errors=others)


def _format_errors(errors: list[dict]) -> str:
    lines = []
    for err in errors:
        lines.append(f"{Path(err['file']).name}:{err['line']}:{err['column']}")
        lines.append(f"  {err['code']}: {err['message']}")
        lines.append("")
    return "\n".join(lines).strip()


def build_verdict(ctx: HookContext, file_path: str, result: TypeCheckResult) -> tuple[Verdict, dict]:
    """Verdict for *result* plus the dict stored in the results cache."""
    name = Path(file_path).name
    dep_count = len(result.dependency_errors)

    if result.success:
        message = f"✅ TypeScript: {name} (incremental)"
        if dep_count:
            message += f" [{dep_count} errors in dependencies]"
        return Verdict.ok(message), {"success": True, "message": message}

    message = f"❌ TypeScript errors in {name}:\n\n{_format_errors(result.errors)}"
    if dep_count:
        message += f"\n\n⚠️ {dep_count} errors in dependencies (hidden)"
    details: dict = {
        "file": file_path,
        "errors": result.errors,
        "dependencyErrors": dep_count,
    }
    if ctx.config.typescript.show_dependency_errors and dep_count:
        details["dependencyErrorList"] = result.dependency_errors[:MAX_LISTED_DEPENDENCY_ERRORS]
    return Verdict.blocked(message, details), {"success": False, "message": message, "details": details}


def evaluate(ctx: HookContext) -> Verdict:
    event = ctx.event
    if not ctx.config.typescript.enabled:
        return Verdict.ok()
    if not event.is_post_tool_use or not event.is_edit_or_write:
        return Verdict.ok()

    file_path = event.file_path
    if not is_typescript_file(file_path):
        return Verdict.ok()
    target = resolve_in_project(file_path, ctx.project_root)
    if not target.exists():
        return Verdict.ok()

    try:
        config_path = TsConfigCache(ctx.project_root).find_config(file_path)
        if config_path is None:
            return Verdict.ok("⚠️ No tsconfig.json found, skipping typecheck")

        results = TypeCheckResultsCache.for_project(ctx.project_root)
        cached = results.get(target)
        if cached is not None:
            if cached.get("success"):
                return Verdict.ok(f"✅ TypeScript: {target.name} (cached)")
            return Verdict.blocked(cached.get("message", ""), cached.get("details"))

        result = run_typecheck(ctx, target, config_path)
        verdict, cache_entry = build_verdict(ctx, file_path, result)
        results.set(target, cache_entry)
        return verdict
    except (ToolUnavailableError, ToolFailedError, TimeoutError, OSError) as exc:
        logger.warning("TypeScript check failed: %s", exc)
        return Verdict.ok(f"⚠️ TypeScript check failed: {exc}")


def main() -> None:
    hook_main(NAME, evaluate)


if __name__ == "__main__":
    main()
