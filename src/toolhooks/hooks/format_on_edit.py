"""Formats edited files with Prettier after the agent changes them.

Never blocks: formatting problems are reported in the message only.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from toolhooks.errors import ToolUnavailableError
from toolhooks.hooks.base import HookContext, hook_main
from toolhooks.models import Verdict
from toolhooks.runner import run_tool
from toolhooks.shared import detect_package_manager, has_dependency, package_exec, resolve_in_project

logger = logging.getLogger(__name__)

NAME = "format-on-edit"

FORMATTABLE_EXTENSIONS = frozenset(
    {".ts", ".tsx", ".js", ".jsx", ".json", ".css", ".scss", ".md", ".html"}
)
SKIP_DIRS = ("node_modules", "dist", "build", ".next", "coverage")


def should_format(file_path: str) -> bool:
    normalized = file_path.replace("\\", "/")
    if PurePosixPath(normalized).suffix.lower() not in FORMATTABLE_EXTENSIONS:
        return False
    return not any(f"/{d}/" in f"/{normalized}" for d in SKIP_DIRS)


def evaluate(ctx: HookContext) -> Verdict:
    config = ctx.config.prettier
    event = ctx.event
    if not config.enabled or not event.is_post_tool_use or not event.is_edit_or_write:
        return Verdict.ok()

    if not has_dependency(ctx.project_root, "prettier"):
        logger.info("Prettier not found in project dependencies, skipping format")
        return Verdict.ok()

    file_path = event.file_path
    if not file_path or not resolve_in_project(file_path, ctx.project_root).exists():
        logger.info("File not found: %s", file_path)
        return Verdict.ok()

    if not should_format(file_path):
        logger.info("Skipping format for: %s", file_path)
        return Verdict.ok()

    argv = package_exec(detect_package_manager(ctx.project_root), "prettier") + ["--write", file_path]
    try:
        run = run_tool(argv, ctx.project_root, config.timeout)
    except ToolUnavailableError as exc:
        logger.warning("Failed to format %s: %s", file_path, exc.message)
        return Verdict.ok(f"⚠️ Prettier not available: {file_path}")

    if run.succeeded:
        return Verdict.ok(f"✓ Formatted: {file_path}")

    logger.warning("Failed to format %s: %s", file_path, run.output.strip()[:200])
    return Verdict.ok(f"⚠️ Failed to format {file_path}")


def main() -> None:
    hook_main(NAME, evaluate)


if __name__ == "__main__":
    main()
