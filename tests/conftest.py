"""Shared test fixtures."""

import json

import pytest

from toolhooks.config import HooksConfig
from toolhooks.hooks.base import HookContext
from toolhooks.models import HookEvent


@pytest.fixture
def project_root(tmp_path):
    """A minimal Node project: package.json plus an empty src/ directory."""
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "demo-app", "dependencies": {}, "devDependencies": {}}),
        encoding="utf-8",
    )
    (tmp_path / "src").mkdir()
    return tmp_path


@pytest.fixture
def make_ctx(project_root):
    """Build a HookContext for a payload dict against the project fixture."""

    def _make(payload: dict, config: HooksConfig | None = None) -> HookContext:
        return HookContext(
            event=HookEvent.model_validate(payload),
            config=config or HooksConfig(),
            project_root=project_root,
        )

    return _make


def write_file(root, relative: str, content: str = ""):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def set_dev_dependencies(root, **deps):
    pkg = json.loads((root / "package.json").read_text(encoding="utf-8"))
    pkg.setdefault("devDependencies", {}).update(deps)
    (root / "package.json").write_text(json.dumps(pkg), encoding="utf-8")
