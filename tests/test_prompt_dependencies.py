"""Tests for the prompt-dependencies hook."""

from toolhooks.config import DependenciesConfig, HooksConfig
from toolhooks.hooks.prompt_dependencies import (
    FORCE_HINT,
    evaluate,
    extract_package_names,
    mentions_dependencies,
)


def prompt(text: str) -> dict:
    return {"event": "UserPromptSubmit", "prompt": text}


class TestDetection:
    def test_mentions_dependency_word(self):
        assert mentions_dependencies("add a new dependency for dates") is True

    def test_mentions_install_command(self):
        assert mentions_dependencies("run npm install recat") is True

    def test_unrelated_prompt(self):
        assert mentions_dependencies("fix the login redirect") is False

    def test_extract_names_skips_articles(self):
        assert extract_package_names("add the chart, then install recharts.") == ["recharts"]


class TestEvaluate:
    def test_typo_in_prompt_blocks(self, make_ctx):
        verdict = evaluate(make_ctx(prompt("please npm install recat")))
        assert verdict.is_blocked
        assert "TYPO DETECTED" in verdict.message
        assert FORCE_HINT in verdict.message
        assert verdict.details == {"packages": ["recat"]}

    def test_trusted_package_passes(self, make_ctx):
        verdict = evaluate(make_ctx(prompt("install react and update package.json")))
        assert not verdict.is_blocked

    def test_dependency_talk_without_names_blocks(self, make_ctx):
        verdict = evaluate(make_ctx(prompt("add the date dependency")))
        assert verdict.is_blocked
        assert "reviewed manually" in verdict.message

    def test_force_skips(self, make_ctx):
        verdict = evaluate(make_ctx(prompt("force npm install left-pad")))
        assert not verdict.is_blocked

    def test_unrelated_prompt_passes(self, make_ctx):
        assert not evaluate(make_ctx(prompt("rename the header component"))).is_blocked

    def test_empty_prompt(self, make_ctx):
        assert not evaluate(make_ctx(prompt(""))).is_blocked

    def test_prompt_check_disabled(self, make_ctx):
        config = HooksConfig(dependencies=DependenciesConfig(prompt_check=False))
        assert not evaluate(make_ctx(prompt("npm install recat"), config)).is_blocked
