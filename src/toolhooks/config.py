"""Configuration for toolhooks.

Hook behaviour is read from ``.toolhooks/config.toml`` in the project root;
process-level knobs (logging, overrides) come from ``TOOLHOOKS_*``
environment variables.
"""

from __future__ import annotations

import tomllib as _tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings

from toolhooks.errors import ConfigError

CONFIG_DIR = ".toolhooks"
CONFIG_FILE = "config.toml"

# Markers looked for when walking up to the project root, in priority order
_ROOT_MARKERS = (CONFIG_DIR, "package.json")

DEFAULT_TRUSTED_PACKAGES = [
    "react", "next", "typescript", "tailwindcss", "lodash", "axios", "express",
    "@radix-ui", "@tanstack", "lucide-react", "clsx", "zod", "recharts", "date-fns",
    "@supabase", "framer-motion", "react-hook-form", "jotai",
]

DEFAULT_TYPO_RISKS = {
    "recat": "react",
    "expres": "express",
    "axois": "axios",
    "lodas": "lodash",
    "typescirpt": "typescript",
    "etherum": "ethereum",
    "nextjs": "next",
}


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = True


class TypeScriptConfig(_Section):
    timeout: float = Field(15.0, gt=0)
    skip_lib_check: bool = True
    show_dependency_errors: bool = False


class ESLintConfig(_Section):
    autofix: bool = True
    timeout: float = Field(30.0, gt=0)


class PrettierConfig(_Section):
    timeout: float = Field(10.0, gt=0)


class ImportsConfig(_Section):
    timeout: float = Field(5.0, gt=0)
    aliases: dict[str, str] = Field(default_factory=lambda: {"@/": "src/", "@": "src/"})


class DependenciesConfig(_Section):
    allow_bypass: bool = True
    typo_detection: bool = True
    prompt_check: bool = True
    trusted_packages: list[str] = Field(default_factory=lambda: list(DEFAULT_TRUSTED_PACKAGES))
    typo_risks: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_TYPO_RISKS))


class OrchestratorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    parallel: bool = True
    stop_on_first_error: bool = True
    verbose: bool = False
    audit: bool = True


class HooksConfig(BaseModel):
    """Validated contents of ``.toolhooks/config.toml``."""

    model_config = ConfigDict(extra="forbid")

    typescript: TypeScriptConfig = Field(default_factory=TypeScriptConfig)
    eslint: ESLintConfig = Field(default_factory=ESLintConfig)
    prettier: PrettierConfig = Field(default_factory=PrettierConfig)
    imports: ImportsConfig = Field(default_factory=ImportsConfig)
    dependencies: DependenciesConfig = Field(default_factory=DependenciesConfig)
    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)


class ToolhooksSettings(BaseSettings):
    """Process settings read from the environment."""

    log_level: str = "warning"
    json_logs: bool = False
    config_path: str | None = None
    project_root: str | None = None

    model_config = {
        "env_prefix": "TOOLHOOKS_",
    }


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from *start* (default cwd) looking for a project marker.

    A ``.toolhooks/`` directory wins over ``package.json``.
    Raises FileNotFoundError if neither is found.
    """
    current = (start or Path.cwd()).resolve()
    for marker in _ROOT_MARKERS:
        for parent in [current, *current.parents]:
            if (parent / marker).exists():
                return parent
    raise FileNotFoundError(
        f"No {CONFIG_DIR}/ or package.json found from {current} up to filesystem root"
    )


def resolve_project_root(cwd: str | None = None, settings: ToolhooksSettings | None = None) -> Path:
    """Project root for a hook run, falling back to the start directory."""
    settings = settings or ToolhooksSettings()
    if settings.project_root:
        return Path(settings.project_root).resolve()
    start = Path(cwd) if cwd else Path.cwd()
    try:
        return find_project_root(start)
    except FileNotFoundError:
        return start.resolve()


def config_path_for(project_root: Path, settings: ToolhooksSettings | None = None) -> Path:
    settings = settings or ToolhooksSettings()
    if settings.config_path:
        return Path(settings.config_path)
    return project_root / CONFIG_DIR / CONFIG_FILE


def load_config(project_root: Path, settings: ToolhooksSettings | None = None) -> HooksConfig:
    """Load config.toml from the project root.

    A missing file yields the defaults. An unreadable or invalid file
    raises :class:`ConfigError`.
    """
    config_path = config_path_for(project_root, settings)
    if not config_path.exists():
        return HooksConfig()

    try:
        with open(config_path, "rb") as f:
            raw = _tomllib.load(f)
    except (OSError, _tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to read {config_path}: {exc}") from exc

    try:
        return HooksConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid configuration in {config_path}",
            details=exc.errors(include_url=False),
        ) from exc
