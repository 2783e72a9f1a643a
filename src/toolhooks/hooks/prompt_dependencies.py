"""UserPromptSubmit hook: flags prompts that ask for dependency changes.

Package names following "install"/"add" go through the same typo and
trust checks as check-dependencies. The word "force" in the prompt skips
the check.
"""

from __future__ import annotations

import re

from toolhooks.hooks.base import HookContext, hook_main
from toolhooks.hooks.check_dependencies import review_packages
from toolhooks.models import Verdict

NAME = "prompt-dependencies"

FORCE_RE = re.compile(r"\bforce\b", re.IGNORECASE)

DEPENDENCY_KEYWORDS = [
    re.compile(r"\bdependenc(?:y|ies)\b", re.IGNORECASE),
    re.compile(r"package\.json", re.IGNORECASE),
    re.compile(r"npm\s+(?:install|add|remove|uninstall)", re.IGNORECASE),
    re.compile(r"pnpm\s+(?:add|remove|install)", re.IGNORECASE),
    re.compile(r"yarn\s+(?:add|remove)", re.IGNORECASE),
    re.compile(r"\b(?:add|remove|update|upgrade)\s+(?:a\s+|the\s+)?package\b", re.IGNORECASE),
]

PACKAGE_NAME_RE = re.compile(r"(?:install|add)\s+(@?[a-z0-9@\-/._]+)", re.IGNORECASE)

# Words that follow "add"/"install" in ordinary prose rather than naming a package
_NOT_PACKAGES = frozenset({"a", "an", "the", "package", "packages", "dependency", "dependencies", "it"})

FORCE_HINT = 'Add "force" to your message to skip this check.'


def mentions_dependencies(prompt: str) -> bool:
    return any(rx.search(prompt) for rx in DEPENDENCY_KEYWORDS)


def extract_package_names(prompt: str) -> list[str]:
    names = []
    for match in PACKAGE_NAME_RE.finditer(prompt):
        name = match.group(1).rstrip(".,")
        if name.lower() not in _NOT_PACKAGES:
            names.append(name)
    return names


def evaluate(ctx: HookContext) -> Verdict:
    config = ctx.config.dependencies
    prompt = ctx.event.prompt
    if not config.enabled or not config.prompt_check or not prompt:
        return Verdict.ok()
    if FORCE_RE.search(prompt) or not mentions_dependencies(prompt):
        return Verdict.ok()

    packages = extract_package_names(prompt)
    if packages:
        findings = review_packages(packages, config)
        if not findings:
            return Verdict.ok()
        warnings = "\n".join(f.render() for f in findings)
        return Verdict.blocked(
            f"{warnings}\n\n🔒 For security reasons, please review manually before installing.\n{FORCE_HINT}",
            details={"packages": [f.package for f in findings]},
        )

    return Verdict.blocked(
        "⚠️ Dependency changes should be reviewed manually.\n\n"
        f"🔒 Check their security before proceeding.\n{FORCE_HINT}"
    )


def main() -> None:
    hook_main(NAME, evaluate)


if __name__ == "__main__":
    main()
