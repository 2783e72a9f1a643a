"""Blocks package installs that are not on the trusted list or look typosquatted.

Applies to Bash tool calls. Run as ``python -m toolhooks.hooks.check_dependencies``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from toolhooks.config import DependenciesConfig
from toolhooks.hooks.base import HookContext, hook_main
from toolhooks.models import Verdict

NAME = "check-dependencies"

BYPASS_RE = re.compile(r"(?:^|\s)(?:--force|--yes|-y)(?=\s|$)")
INSTALL_RE = re.compile(
    r"(npm\s+(?:install|i|add)|pnpm\s+(?:add|install|i)|yarn\s+add)\s+(.+)",
    re.IGNORECASE,
)
_SEPARATOR_RE = re.compile(r"&&|\|\||[;|]")
_QUOTES_RE = re.compile(r"^['\"]|['\"]$")

BYPASS_HINT = "Add --force to the command to bypass this check."


@dataclass(frozen=True)
class PackageFinding:
    package: str
    kind: str  # "typo" or "untrusted"
    suggestion: str | None = None

    def render(self) -> str:
        if self.kind == "typo":
            return f'🚨 TYPO DETECTED: "{self.package}" → did you mean "{self.suggestion}"?'
        return f'⚠️  Package "{self.package}" is not in the trusted packages list'


def extract_packages(command: str) -> list[str] | None:
    """Package specs named by an install command, or None if it is not one."""
    match = INSTALL_RE.search(command)
    if not match:
        return None
    args = _SEPARATOR_RE.split(match.group(2), maxsplit=1)[0]
    return [
        _QUOTES_RE.sub("", token)
        for token in args.split()
        if token and not token.startswith("-")
    ]


def strip_version(spec: str) -> str:
    """``react@18`` -> ``react``; ``@scope/pkg@^1.2`` -> ``@scope/pkg``."""
    at = spec.find("@", 1) if spec.startswith("@") else spec.find("@")
    return spec[:at] if at > 0 else spec


def base_name(package: str) -> str:
    """Package name without its ``@scope/`` prefix."""
    return re.sub(r"^@", "", re.sub(r"^@[^/]+/", "", package))


def is_trusted(package: str, trusted_packages: list[str]) -> bool:
    for trusted in trusted_packages:
        if package.startswith("@"):
            if trusted.startswith("@") and (package == trusted or package.startswith(trusted + "/")):
                return True
        elif package == trusted or package.startswith(trusted + "/"):
            return True
    return False


def review_packages(packages: list[str], config: DependenciesConfig) -> list[PackageFinding]:
    """Typo and trust findings for *packages*; an empty list means all are trusted."""
    findings: list[PackageFinding] = []
    for spec in packages:
        package = strip_version(spec)
        if not package:
            continue
        if config.typo_detection:
            intended = config.typo_risks.get(base_name(package))
            if intended:
                findings.append(PackageFinding(package, "typo", intended))
                continue
        if not is_trusted(package, config.trusted_packages):
            findings.append(PackageFinding(package, "untrusted"))
    return findings


def evaluate(ctx: HookContext) -> Verdict:
    config = ctx.config.dependencies
    event = ctx.event
    if not config.enabled or event.tool_name != "Bash":
        return Verdict.ok()
    if event.event not in ("PreToolUse", "PostToolUse"):
        return Verdict.ok()

    command = event.command
    if config.allow_bypass and BYPASS_RE.search(command):
        return Verdict.ok()

    packages = extract_packages(command)
    if not packages:
        return Verdict.ok()

    findings = review_packages(packages, config)
    if not findings:
        return Verdict.ok()

    warnings = "\n".join(f.render() for f in findings)
    message = (
        f"❌ Package installation blocked:\n\n{warnings}\n\n"
        "🔒 For security reasons, please review manually before installing."
    )
    if config.allow_bypass:
        message += f"\n{BYPASS_HINT}"
    return Verdict.blocked(
        message,
        details={
            "packages": [
                {"package": f.package, "reason": f.kind, "suggestion": f.suggestion}
                for f in findings
            ],
        },
    )


def main() -> None:
    hook_main(NAME, evaluate)


if __name__ == "__main__":
    main()
