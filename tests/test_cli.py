"""Tests for the toolhooks CLI."""

import io
import json
from unittest.mock import patch

import pytest

from toolhooks.cache import TypeCheckResultsCache
from toolhooks.cli import main
from toolhooks.config import HooksConfig, load_config


class TestInit:
    def test_writes_config_and_settings(self, tmp_path, capsys):
        main(["init", "-d", str(tmp_path)])

        config_path = tmp_path / ".toolhooks" / "config.toml"
        assert config_path.exists()
        assert load_config(tmp_path) == HooksConfig()

        settings = json.loads((tmp_path / ".claude" / "settings.json").read_text())
        commands = [
            hook["command"]
            for groups in settings["hooks"].values()
            for group in groups
            for hook in group["hooks"]
        ]
        assert any(c.endswith("-m toolhooks.orchestrator") for c in commands)
        assert any(c.endswith("-m toolhooks.hooks.check_dependencies") for c in commands)
        assert any(c.endswith("-m toolhooks.hooks.prompt_dependencies") for c in commands)
        assert "Created" in capsys.readouterr().out

    def test_existing_files_kept(self, tmp_path, capsys):
        (tmp_path / ".claude").mkdir()
        (tmp_path / ".claude" / "settings.json").write_text('{"mine": true}')
        (tmp_path / ".toolhooks").mkdir()
        (tmp_path / ".toolhooks" / "config.toml").write_text("[eslint]\nenabled = false\n")

        main(["init", "-d", str(tmp_path)])

        assert json.loads((tmp_path / ".claude" / "settings.json").read_text()) == {"mine": True}
        assert load_config(tmp_path).eslint.enabled is False
        assert capsys.readouterr().out.count("Skipped") == 2

    def test_force_rewrites_config(self, tmp_path):
        (tmp_path / ".toolhooks").mkdir()
        (tmp_path / ".toolhooks" / "config.toml").write_text("[eslint]\nenabled = false\n")
        main(["init", "-d", str(tmp_path), "--force"])
        assert load_config(tmp_path).eslint.enabled is True


class TestConfigCommand:
    def test_prints_effective_config(self, project_root, capsys):
        main(["config", "-d", str(project_root)])
        data = json.loads(capsys.readouterr().out)
        assert data["typescript"]["timeout"] == 15
        assert data["orchestrator"]["stop_on_first_error"] is True

    def test_invalid_config_exits(self, project_root, capsys):
        (project_root / ".toolhooks").mkdir()
        (project_root / ".toolhooks" / "config.toml").write_text("[eslint]\nbogus = 1\n")
        with pytest.raises(SystemExit) as exc_info:
            main(["config", "-d", str(project_root)])
        assert exc_info.value.code == 1
        assert "eslint.bogus" in capsys.readouterr().err


class TestCacheCommand:
    def test_show_and_clear(self, project_root, capsys):
        source = project_root / "src" / "a.ts"
        source.write_text("x")
        TypeCheckResultsCache.for_project(project_root).set(source, {"success": True})

        main(["cache", "show", "-d", str(project_root)])
        assert str(source) in capsys.readouterr().out

        main(["cache", "clear", "-d", str(project_root)])
        assert "Cleared 1" in capsys.readouterr().out
        assert TypeCheckResultsCache.for_project(project_root).entries == {}

    def test_show_empty(self, project_root, capsys):
        main(["cache", "show", "-d", str(project_root)])
        assert "empty" in capsys.readouterr().out


class TestAuditCommand:
    def test_filters_by_hook(self, project_root, capsys):
        from toolhooks.audit import AuditLogger

        audit = AuditLogger.for_project(project_root)
        audit.log("lint-after-edit", "blocked")
        audit.log("format-on-edit", "ok")

        main(["audit", "-d", str(project_root), "--hook", "lint-after-edit"])
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["hook"] == "lint-after-edit"

    def test_no_entries(self, project_root, capsys):
        main(["audit", "-d", str(project_root), "--since", "2099-01-01T00:00:00"])
        assert "No matching audit entries." in capsys.readouterr().out

    def test_bad_since(self, project_root):
        with pytest.raises(SystemExit) as exc_info:
            main(["audit", "-d", str(project_root), "--since", "yesterday"])
        assert exc_info.value.code == 1


class TestRunCommand:
    def test_runs_named_hook(self, project_root, capsys):
        payload = json.dumps({
            "event": "PreToolUse",
            "tool_name": "Bash",
            "tool_input": {"command": "npm install recat"},
            "cwd": str(project_root),
        })
        with patch("sys.stdin", io.StringIO(payload)):
            with pytest.raises(SystemExit) as exc_info:
                main(["run", "check-dependencies"])
        assert exc_info.value.code == 1
        assert json.loads(capsys.readouterr().out)["status"] == "blocked"

    def test_unknown_hook(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "no-such-hook"])
        assert exc_info.value.code == 2

    def test_no_command(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1
