"""Helpers shared by every hook."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

_TS_RE = re.compile(r"\.(ts|tsx)$")
_CODE_RE = re.compile(r"\.(ts|tsx|js|jsx)$")


def is_typescript_file(file_path: str) -> bool:
    return bool(_TS_RE.search(file_path or ""))


def is_code_file(file_path: str) -> bool:
    """True for TypeScript and JavaScript sources (.ts .tsx .js .jsx)."""
    return bool(_CODE_RE.search(file_path or ""))


def normalize_path(file_path: str) -> str:
    """Collapse ``..``/``.`` segments and use forward slashes on every platform."""
    return os.path.normpath(file_path.replace("\\", "/")).replace("\\", "/")


def format_error(error: dict[str, Any]) -> str:
    """Render one diagnostic as a short block of text.

    Recognised keys: file, line, column, message, code, suggestion.
    """
    output = f"❌ {error.get('file', '')}"
    if error.get("line"):
        output += f":{error['line']}"
    if error.get("column"):
        output += f":{error['column']}"
    output += f"\n   {error.get('message', '')}"
    if error.get("code"):
        output += f" ({error['code']})"
    if error.get("suggestion"):
        output += f"\n\n💡 {error['suggestion']}"
    return output


def read_package_json(project_root: Path) -> dict[str, Any]:
    """Return the parsed package.json, or ``{}`` if missing or malformed."""
    path = project_root / "package.json"
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def has_dependency(project_root: Path, name: str) -> bool:
    """True if *name* is listed in dependencies or devDependencies."""
    pkg = read_package_json(project_root)
    return bool(
        (pkg.get("dependencies") or {}).get(name)
        or (pkg.get("devDependencies") or {}).get(name)
    )


def detect_package_manager(project_root: Path) -> str:
    if (project_root / "pnpm-lock.yaml").exists():
        return "pnpm"
    if (project_root / "yarn.lock").exists():
        return "yarn"
    return "npm"


def package_exec(package_manager: str, tool: str) -> list[str]:
    """argv prefix that runs a locally installed binary through the package manager."""
    if package_manager == "pnpm":
        return ["pnpm", "exec", tool]
    if package_manager == "yarn":
        return ["yarn", tool]
    return ["npx", "--no", tool]


def resolve_in_project(file_path: str, project_root: Path) -> Path:
    """Absolute path for *file_path*, relative paths being taken from the project root."""
    path = Path(file_path)
    if not path.is_absolute():
        path = project_root / path
    return path
