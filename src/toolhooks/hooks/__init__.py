"""Hook catalog: CLI name -> module, plus the config section that enables it."""

from __future__ import annotations

from dataclasses import dataclass

from toolhooks.config import HooksConfig


@dataclass(frozen=True)
class HookSpec:
    name: str
    module: str
    config_section: str

    def enabled(self, config: HooksConfig) -> bool:
        return getattr(config, self.config_section).enabled


HOOKS: dict[str, HookSpec] = {
    spec.name: spec
    for spec in (
        HookSpec("check-dependencies", "toolhooks.hooks.check_dependencies", "dependencies"),
        HookSpec("validate-imports", "toolhooks.hooks.validate_imports", "imports"),
        HookSpec("typecheck-after-edit", "toolhooks.hooks.typecheck_after_edit", "typescript"),
        HookSpec("lint-after-edit", "toolhooks.hooks.lint_after_edit", "eslint"),
        HookSpec("format-on-edit", "toolhooks.hooks.format_on_edit", "prettier"),
        HookSpec("prompt-dependencies", "toolhooks.hooks.prompt_dependencies", "dependencies"),
    )
}


def get_hook(name: str) -> HookSpec:
    try:
        return HOOKS[name]
    except KeyError:
        raise KeyError(f"Unknown hook: {name}") from None
