"""toolhooks CLI — run hooks, orchestrate, init, config, cache, audit."""

from __future__ import annotations

import argparse
import importlib
import json
import sys
from datetime import datetime
from pathlib import Path


def _project_root(args: argparse.Namespace) -> Path:
    from toolhooks.config import resolve_project_root

    return resolve_project_root(args.directory)


def cmd_run(args: argparse.Namespace) -> None:
    """Run a single hook against the payload on stdin."""
    from toolhooks.hooks import get_hook
    from toolhooks.hooks.base import run_hook

    try:
        spec = get_hook(args.hook)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        sys.exit(2)

    module = importlib.import_module(spec.module)
    sys.exit(run_hook(spec.name, module.evaluate))


def cmd_orchestrate(args: argparse.Namespace) -> None:
    """Run the full hook pipeline against the payload on stdin."""
    from toolhooks.orchestrator import main as orchestrator_main

    orchestrator_main()


def cmd_init(args: argparse.Namespace) -> None:
    """Write a default config and register the hooks with the agent."""
    from toolhooks.config import CONFIG_DIR, CONFIG_FILE
    from toolhooks.template_renderer import render_all

    root = (Path(args.directory) if args.directory else Path.cwd()).resolve()
    rendered = render_all(root)

    config_path = root / CONFIG_DIR / CONFIG_FILE
    config_path.parent.mkdir(parents=True, exist_ok=True)
    if config_path.exists() and not args.force:
        print(f"  Skipped: {config_path} (already exists)")
    else:
        config_path.write_text(rendered["config.toml"], encoding="utf-8")
        print(f"  Created: {config_path}")

    # .claude/settings.json is never overwritten
    settings_path = root / ".claude" / "settings.json"
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    if not settings_path.exists():
        settings_path.write_text(rendered["claude-settings.json"], encoding="utf-8")
        print(f"  Created: {settings_path}")
    else:
        print(f"  Skipped: {settings_path} (already exists)")


def cmd_config(args: argparse.Namespace) -> None:
    """Print the effective configuration as JSON."""
    from toolhooks.config import config_path_for, load_config
    from toolhooks.errors import ConfigError

    root = _project_root(args)
    try:
        config = load_config(root)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        for detail in e.details or []:
            loc = ".".join(str(part) for part in detail.get("loc", ()))
            print(f"  {loc}: {detail.get('msg', '')}", file=sys.stderr)
        sys.exit(1)

    print(f"# {config_path_for(root)}", file=sys.stderr)
    print(json.dumps(config.model_dump(), indent=2))


def cmd_cache(args: argparse.Namespace) -> None:
    """Show or clear the type-check results cache."""
    from toolhooks.cache import TypeCheckResultsCache

    root = _project_root(args)
    cache = TypeCheckResultsCache.for_project(root)

    if args.action == "clear":
        removed = cache.clear()
        print(f"Cleared {removed} cached result(s) from {cache.path}")
        return

    entries = cache.entries
    if not entries:
        print("Type-check cache is empty.")
        return
    for path, entry in sorted(entries.items()):
        result = entry.get("result") or {}
        status = "ok" if result.get("success") else "blocked"
        stamp = datetime.fromtimestamp(float(entry.get("timestamp", 0))).isoformat(timespec="seconds")
        print(f"  [{stamp}] {status:7} {path}")


def cmd_audit(args: argparse.Namespace) -> None:
    """Query the audit log."""
    from toolhooks.audit import AuditLogger

    audit = AuditLogger.for_project(_project_root(args))

    since = None
    if args.since:
        try:
            since = datetime.fromisoformat(args.since)
        except ValueError:
            print(f"Error: --since must be an ISO timestamp, got {args.since!r}", file=sys.stderr)
            sys.exit(1)

    entries = audit.query(since=since, hook=args.hook, status=args.status)

    if not entries:
        print("No matching audit entries.")
        return

    for e in entries:
        print(json.dumps(e, ensure_ascii=False))


def main(argv: list[str] | None = None) -> None:
    from toolhooks.hooks import HOOKS

    parser = argparse.ArgumentParser(
        prog="toolhooks",
        description="Guard hooks for coding agents: dependency, import, type, lint and format checks",
    )
    sub = parser.add_subparsers(dest="command")

    # run
    p_run = sub.add_parser("run", help="Run one hook with the event payload on stdin")
    p_run.add_argument("hook", choices=sorted(HOOKS), help="Hook name")

    # orchestrate
    sub.add_parser("orchestrate", help="Run the full hook pipeline with the event payload on stdin")

    # init
    p_init = sub.add_parser("init", help="Write default config and register hooks")
    p_init.add_argument("-d", "--directory", help="Project directory (default: current directory)")
    p_init.add_argument("--force", action="store_true", help="Overwrite an existing config.toml")

    # config
    p_config = sub.add_parser("config", help="Show the effective configuration")
    p_config.add_argument("-d", "--directory", help="Project directory (default: auto-discover)")

    # cache
    p_cache = sub.add_parser("cache", help="Inspect or clear the type-check cache")
    p_cache.add_argument("action", choices=["show", "clear"], help="Cache action")
    p_cache.add_argument("-d", "--directory", help="Project directory (default: auto-discover)")

    # audit
    p_audit = sub.add_parser("audit", help="Query audit log")
    p_audit.add_argument("--since", help="ISO timestamp to filter from")
    p_audit.add_argument("--hook", help="Hook name to filter")
    p_audit.add_argument("--status", choices=["ok", "blocked"], help="Verdict status to filter")
    p_audit.add_argument("-d", "--directory", help="Project directory (default: auto-discover)")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "run": cmd_run,
        "orchestrate": cmd_orchestrate,
        "init": cmd_init,
        "config": cmd_config,
        "cache": cmd_cache,
        "audit": cmd_audit,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
