"""Renders the files written by ``toolhooks init``."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from toolhooks.config import HooksConfig

_TEMPLATES_DIR = Path(__file__).parent / "templates"


def toml_value(value: Any) -> str:
    """Render a config value as a TOML literal (inline tables for dicts)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(toml_value(v) for v in value) + "]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        pairs = ", ".join(f"{json.dumps(str(k))} = {toml_value(v)}" for k, v in value.items())
        return "{ " + pairs + " }"
    raise TypeError(f"Cannot render {type(value).__name__} as TOML")


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["toml"] = toml_value
    return env


def _build_template_context(project_root: Path, config: HooksConfig) -> dict:
    if os.name == "nt":
        python_exe = "python.exe"
    else:
        python_exe = sys.executable.replace("\\", "/")

    ctx = config.model_dump()
    ctx.update({
        "project_name": project_root.name,
        "project_root": str(project_root).replace("\\", "/"),
        "python_executable": python_exe,
    })
    return ctx


def render_template(template_name: str, project_root: Path, config: HooksConfig | None = None) -> str:
    template = _environment().get_template(template_name)
    return template.render(**_build_template_context(project_root, config or HooksConfig()))


def render_all(project_root: Path, config: HooksConfig | None = None) -> dict[str, str]:
    """Render all templates and return {filename: content} mapping."""
    return {
        "config.toml": render_template("config.toml.j2", project_root, config),
        "claude-settings.json": render_template("claude-settings.json.j2", project_root, config),
    }
