"""Tests for config loading and project root discovery."""

import pytest

from toolhooks.config import (
    HooksConfig,
    ToolhooksSettings,
    find_project_root,
    load_config,
    resolve_project_root,
)
from toolhooks.errors import ConfigError


def write_config(root, text: str):
    path = root / ".toolhooks" / "config.toml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path)
        assert config == HooksConfig()
        assert config.typescript.timeout == 15
        assert config.eslint.timeout == 30
        assert config.prettier.timeout == 10
        assert config.imports.timeout == 5
        assert config.imports.aliases == {"@/": "src/", "@": "src/"}
        assert "react" in config.dependencies.trusted_packages
        assert config.dependencies.typo_risks["recat"] == "react"
        assert config.orchestrator.parallel is True
        assert config.orchestrator.stop_on_first_error is True

    def test_overrides(self, tmp_path):
        write_config(tmp_path, """
[typescript]
timeout = 45
show_dependency_errors = true

[eslint]
enabled = false

[dependencies]
trusted_packages = ["react", "@acme"]

[orchestrator]
parallel = false
""")
        config = load_config(tmp_path)
        assert config.typescript.timeout == 45
        assert config.typescript.show_dependency_errors is True
        assert config.typescript.skip_lib_check is True
        assert config.eslint.enabled is False
        assert config.dependencies.trusted_packages == ["react", "@acme"]
        assert config.orchestrator.parallel is False

    def test_malformed_toml(self, tmp_path):
        write_config(tmp_path, "[typescript\ntimeout = ")
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == "CONFIG_ERROR"

    def test_unknown_key_rejected(self, tmp_path):
        write_config(tmp_path, "[eslint]\nautofx = true\n")
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.details[0]["loc"] == ("eslint", "autofx")

    def test_non_positive_timeout_rejected(self, tmp_path):
        write_config(tmp_path, "[prettier]\ntimeout = 0\n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_config_path_override(self, tmp_path):
        custom = tmp_path / "hooks.toml"
        custom.write_text("[imports]\nenabled = false\n")
        config = load_config(tmp_path, ToolhooksSettings(config_path=str(custom)))
        assert config.imports.enabled is False


class TestProjectRoot:
    def test_toolhooks_dir_wins_over_package_json(self, tmp_path):
        (tmp_path / ".toolhooks").mkdir()
        nested = tmp_path / "packages" / "web"
        nested.mkdir(parents=True)
        (nested / "package.json").write_text("{}")
        assert find_project_root(nested) == tmp_path

    def test_package_json(self, tmp_path):
        (tmp_path / "package.json").write_text("{}")
        deep = tmp_path / "src" / "components"
        deep.mkdir(parents=True)
        assert find_project_root(deep) == tmp_path

    def test_resolve_from_payload_cwd(self, tmp_path):
        (tmp_path / "package.json").write_text("{}")
        (tmp_path / "src").mkdir()
        settings = ToolhooksSettings(project_root=None)
        assert resolve_project_root(str(tmp_path / "src"), settings) == tmp_path.resolve()

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TOOLHOOKS_PROJECT_ROOT", str(tmp_path))
        assert resolve_project_root("/somewhere/else", ToolhooksSettings()) == tmp_path.resolve()

    def test_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("TOOLHOOKS_LOG_LEVEL", "debug")
        monkeypatch.setenv("TOOLHOOKS_JSON_LOGS", "true")
        settings = ToolhooksSettings()
        assert settings.log_level == "debug"
        assert settings.json_logs is True
