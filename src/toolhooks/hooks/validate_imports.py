"""Blocks edits that import local modules which do not exist.

Only relative (``./x``) and alias (``@/x``) specifiers are checked. Bare
package imports are left to the package manager.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from toolhooks.hooks.base import HookContext, hook_main
from toolhooks.models import ToolUse, Verdict
from toolhooks.shared import is_code_file, normalize_path, read_package_json

NAME = "validate-imports"

IMPORT_RE = re.compile(
    r"""(?:import|export)\s+(?:type\s+)?"""
    r"""(?:\{[^}]*\}|\*(?:\s+as\s+\w+)?|\w+(?:\s*,\s*(?:\{[^}]*\}|\*\s+as\s+\w+))?)"""
    r"""\s+from\s+['"]([^'"]+)['"]"""
)

RESOLVE_EXTENSIONS = ("", ".ts", ".tsx", ".js", ".jsx", ".json")
_STRIP_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")

SKIP_KEYWORD_RE = re.compile(r"\bskip-import-check\b", re.IGNORECASE)


@dataclass(frozen=True)
class InvalidImport:
    file: str
    specifier: str
    resolved: str
    suggestion: str | None = None

    def as_dict(self) -> dict:
        return {
            "file": self.file,
            "import": self.specifier,
            "resolved": self.resolved,
            "suggestion": self.suggestion,
        }


def extract_imports(content: str) -> list[str]:
    """Specifiers of every ``import ... from``/``export ... from`` statement."""
    return [m.group(1) for m in IMPORT_RE.finditer(content)]


def is_local_specifier(specifier: str) -> bool:
    return specifier.startswith(".") or specifier.startswith("@")


def is_installed_package(specifier: str, project_root: Path) -> bool:
    """True for ``@scope/pkg`` specifiers that belong to an installed package."""
    if specifier.startswith("@/") or not specifier.startswith("@"):
        return False
    parts = specifier.split("/")
    scope = parts[0]
    if (project_root / "node_modules" / scope).is_dir():
        return True
    if len(parts) < 2:
        return False
    package = f"{scope}/{parts[1]}"
    pkg = read_package_json(project_root)
    return any(package in (pkg.get(key) or {}) for key in ("dependencies", "devDependencies", "peerDependencies"))


def resolve_alias(specifier: str, aliases: dict[str, str]) -> str:
    # Longest alias first so "@/" wins over "@"
    for alias in sorted(aliases, key=len, reverse=True):
        if specifier.startswith(alias):
            return aliases[alias] + specifier[len(alias):]
    return specifier


def resolve_specifier(specifier: str, file_path: str, aliases: dict[str, str]) -> str:
    """Path the specifier points at, relative to the project root unless absolute."""
    if specifier.startswith("."):
        return normalize_path(os.path.join(os.path.dirname(file_path), specifier))
    return normalize_path(resolve_alias(specifier, aliases))


def module_exists(resolved: str, project_root: Path) -> bool:
    base = project_root / resolved
    for ext in RESOLVE_EXTENSIONS:
        if Path(f"{base}{ext}").is_file():
            return True
        if (base / f"index{ext}").is_file():
            return True
    return False


def suggest_similar(specifier: str, resolved: str, project_root: Path) -> str | None:
    """A "Did you mean" hint from same-directory files with a similar name."""
    target = project_root / resolved
    directory = target.parent
    if not directory.is_dir():
        return None
    wanted = target.name.lower()
    if not wanted:
        return None
    for entry in sorted(directory.iterdir()):
        name = entry.name
        lowered = name.lower()
        if lowered == wanted or lowered.startswith(wanted):
            replacement = name
            for ext in _STRIP_EXTENSIONS:
                if entry.is_file() and name.endswith(ext):
                    replacement = name[: -len(ext)]
                    break
            head, _, _ = specifier.rpartition("/")
            return f'Did you mean: "{head + "/" if head else ""}{replacement}"?'
    return None


def check_tool_use(tool_use: ToolUse, ctx: HookContext) -> list[InvalidImport]:
    file_path = tool_use.file_path
    if not tool_use.is_edit_or_write or not is_code_file(file_path):
        return []

    aliases = ctx.config.imports.aliases
    invalid: list[InvalidImport] = []
    for specifier in extract_imports(tool_use.edited_content):
        if not is_local_specifier(specifier) or is_installed_package(specifier, ctx.project_root):
            continue
        resolved = resolve_specifier(specifier, file_path, aliases)
        if module_exists(resolved, ctx.project_root):
            continue
        invalid.append(
            InvalidImport(
                file=file_path,
                specifier=specifier,
                resolved=resolved,
                suggestion=suggest_similar(specifier, resolved, ctx.project_root),
            )
        )
    return invalid


def render_message(invalid: list[InvalidImport]) -> str:
    message = "❌ Invalid imports detected:\n\n"
    for item in invalid:
        message += f"   {item.file}\n"
        message += f'   Import: "{item.specifier}"\n'
        message += f"   Path: {item.resolved}\n"
        if item.suggestion:
            message += f"   💡 {item.suggestion}\n"
        message += "\n"
    return message.strip()


def evaluate(ctx: HookContext) -> Verdict:
    event = ctx.event
    if not ctx.config.imports.enabled:
        return Verdict.ok()

    if event.is_batch:
        if SKIP_KEYWORD_RE.search(event.prompt):
            return Verdict.ok("⏭️ Import validation skipped")
        tool_uses = event.tool_uses
    elif event.is_post_tool_use and event.is_edit_or_write:
        tool_uses = [event]
    else:
        return Verdict.ok()

    invalid = [item for tool_use in tool_uses for item in check_tool_use(tool_use, ctx)]
    if not invalid:
        return Verdict.ok()

    message = render_message(invalid)
    if event.is_batch:
        message += '\n\n   Add "skip-import-check" to skip this check.'
    return Verdict.blocked(
        message,
        details={"errors": [item.as_dict() for item in invalid], "count": len(invalid)},
    )


def main() -> None:
    hook_main(NAME, evaluate)


if __name__ == "__main__":
    main()
