"""Runs ESLint on files the agent just edited and blocks on unfixable errors.

Single-event payloads lint the edited file with ``eslint --fix``. Batched
payloads (``tool_uses``) run the project's ``lint`` script on every edited
file, or on the whole project when only Bash file operations were seen.
"""

from __future__ import annotations

import logging
import re

from toolhooks.errors import ToolUnavailableError
from toolhooks.hooks.base import HookContext, hook_main
from toolhooks.models import Verdict
from toolhooks.runner import run_tool
from toolhooks.shared import detect_package_manager, is_code_file, package_exec, resolve_in_project

logger = logging.getLogger(__name__)

NAME = "lint-after-edit"

MAX_OUTPUT_CHARS = 500
MAX_SUMMARY_LINES = 10
PROJECT_LINT_TIMEOUT = 60.0

SKIP_KEYWORD_RE = re.compile(r"\bskip-lint\b", re.IGNORECASE)
FILE_OPERATIONS_RE = re.compile(r"\b(?:mv|cp|rm|mkdir|touch|sed|awk)\b")


def has_lint_errors(output: str) -> bool:
    return "error" in output or "✖" in output


def count_problems(output: str) -> tuple[int, int]:
    """(errors, warnings) as counted by occurrences in the linter output."""
    errors = len(re.findall(r"error", output, re.IGNORECASE))
    warnings = len(re.findall(r"warning", output, re.IGNORECASE))
    return errors, warnings


def lint_file(ctx: HookContext) -> Verdict:
    config = ctx.config.eslint
    file_path = ctx.event.file_path
    if not is_code_file(file_path):
        return Verdict.ok()
    if not resolve_in_project(file_path, ctx.project_root).exists():
        return Verdict.ok()

    argv = package_exec(detect_package_manager(ctx.project_root), "eslint") + [file_path]
    if config.autofix:
        argv.append("--fix")

    try:
        run = run_tool(argv, ctx.project_root, config.timeout)
    except ToolUnavailableError as exc:
        logger.warning("ESLint unavailable: %s", exc.message)
        return Verdict.ok(f"⚠️ ESLint not available or failed to run: {file_path}")

    if run.succeeded:
        return Verdict.ok(f"✅ Lint passed: {file_path}")

    output = run.output
    if not run.timed_out and has_lint_errors(output):
        return Verdict.blocked(
            f"❌ ESLint found errors in {file_path}:\n\n{output[:MAX_OUTPUT_CHARS]}\n\n"
            "💡 Fix the errors before continuing."
        )

    logger.warning("ESLint exited with %s and no lint errors in output", run.returncode)
    return Verdict.ok(f"⚠️ ESLint not available or failed to run: {file_path}")


def _lint_script(ctx: HookContext, files: list[str], timeout: float) -> Verdict | str:
    """Run ``<pm> lint [files]``; returns an ok Verdict or the failing output."""
    pm = detect_package_manager(ctx.project_root)
    argv = [pm, "run", "lint"] if pm == "npm" else [pm, "lint"]
    if files:
        argv += (["--"] if pm == "npm" else []) + files

    try:
        run = run_tool(argv, ctx.project_root, timeout)
    except ToolUnavailableError as exc:
        logger.warning("Lint script unavailable: %s", exc.message)
        return Verdict.ok(f"⚠️ Could not run the lint script: {exc.message}")

    if run.succeeded:
        return Verdict.ok()
    if run.timed_out:
        return Verdict.ok("⚠️ Lint timed out")
    return run.output


def _problem_summary(output: str) -> str:
    errors, warnings = count_problems(output)
    summary = ""
    if errors:
        summary += f"🔴 {errors} error(s)\n"
    if warnings:
        summary += f"🟡 {warnings} warning(s)\n"
    return summary


def lint_batch(ctx: HookContext) -> Verdict:
    event = ctx.event
    edited = [use.file_path for use in event.tool_uses if use.is_edit_or_write and use.file_path]
    bash_file_ops = any(
        use.tool_name == "Bash" and FILE_OPERATIONS_RE.search(use.command)
        for use in event.tool_uses
    )

    if not edited and not bash_file_ops:
        return Verdict.ok()
    if SKIP_KEYWORD_RE.search(event.prompt):
        return Verdict.ok("⏭️ Lint skipped (skip-lint found)")

    if not edited:
        result = _lint_script(ctx, [], PROJECT_LINT_TIMEOUT)
        if isinstance(result, Verdict):
            return result if result.message else Verdict.ok("✅ Lint passed (whole project)")
        return Verdict.blocked(
            "⚠️ Lint found problems after a Bash file operation:\n\n"
            f"{_problem_summary(result)}\n"
            '💡 Run the lint:fix script or add "skip-lint" to skip this check.'
        )

    lintable = [path for path in edited if is_code_file(path)]
    if not lintable:
        return Verdict.ok("⏭️ No lintable files edited")

    result = _lint_script(ctx, lintable, ctx.config.eslint.timeout)
    if isinstance(result, Verdict):
        return result if result.message else Verdict.ok(f"✅ Lint passed ({len(lintable)} file(s))")

    first_lines = [
        line for line in result.splitlines() if "error" in line or "warning" in line
    ][:MAX_SUMMARY_LINES]
    return Verdict.blocked(
        f"⚠️ Lint found problems in {len(lintable)} file(s):\n\n"
        f"{_problem_summary(result)}\n"
        "First errors:\n```\n" + "\n".join(first_lines) + "\n```\n\n"
        '💡 Run the lint:fix script to fix them automatically\n'
        '   or add "skip-lint" to your message to skip this check.',
        details={"files": lintable},
    )


def evaluate(ctx: HookContext) -> Verdict:
    if not ctx.config.eslint.enabled:
        return Verdict.ok()
    event = ctx.event
    if event.is_batch:
        return lint_batch(ctx)
    if not event.is_post_tool_use or not event.is_edit_or_write:
        return Verdict.ok()
    return lint_file(ctx)


def main() -> None:
    hook_main(NAME, evaluate)


if __name__ == "__main__":
    main()
