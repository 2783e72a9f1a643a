"""Content-hash keyed caches used by the type-check hook.

``TypeCheckResultsCache`` remembers the verdict for a file until its
content changes or the entry is an hour old. ``TsConfigCache`` remembers
which tsconfig governs a file and drops everything once any tsconfig is
edited.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger(__name__)

CACHE_DIR = Path(".toolhooks") / "cache"
RESULTS_CACHE_FILE = "typecheck-results.json"
TSCONFIG_CACHE_FILE = "tsconfig.json"

RESULT_TTL_SECONDS = 3600

TSCONFIG_CANDIDATES = ("tsconfig.json", "tsconfig.app.json", "tsconfig.node.json")


def sha256_of_file(path: Path) -> str | None:
    """Hex SHA-256 of the file's bytes, or None if it cannot be read."""
    try:
        return hashlib.sha256(path.read_bytes()).hexdigest()
    except OSError:
        return None


def _load_json(path: Path, default: dict[str, Any]) -> dict[str, Any]:
    if not path.exists():
        return default
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        logger.warning("Discarding unreadable cache file %s", path)
        return default
    return data if isinstance(data, dict) else default


def _write_json(path: Path, data: dict[str, Any]) -> None:
    """Atomically replace *path* with *data* serialized as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.{os.getpid()}.tmp")
    tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
    os.replace(tmp, path)


class TypeCheckResultsCache:
    """Caches type-check results by file hash to avoid re-checking unchanged files.

    Entries are ``{path: {"hash", "timestamp", "result"}}``; timestamps are
    seconds since the epoch.
    """

    def __init__(
        self,
        cache_file: Path,
        *,
        ttl: float = RESULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._path = cache_file
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, Any] = {
            path: entry
            for path, entry in _load_json(cache_file, {}).items()
            if isinstance(entry, dict)
        }

    @classmethod
    def for_project(cls, project_root: Path, **kwargs: Any) -> TypeCheckResultsCache:
        return cls(project_root / CACHE_DIR / RESULTS_CACHE_FILE, **kwargs)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def entries(self) -> dict[str, Any]:
        return dict(self._entries)

    def get(self, file_path: str | Path) -> dict[str, Any] | None:
        """Cached result for *file_path* if content is unchanged and the entry is fresh."""
        current = sha256_of_file(Path(file_path))
        if current is None:
            return None

        cached = self._entries.get(str(file_path))
        if not cached or cached.get("hash") != current:
            return None

        try:
            age = self._clock() - float(cached.get("timestamp", 0))
        except (TypeError, ValueError):
            return None
        if age >= self._ttl:
            return None
        result = cached.get("result")
        return result if isinstance(result, dict) else None

    def set(self, file_path: str | Path, result: dict[str, Any]) -> None:
        digest = sha256_of_file(Path(file_path))
        if digest is None:
            return
        self._entries[str(file_path)] = {
            "hash": digest,
            "timestamp": self._clock(),
            "result": result,
        }
        self._save()

    def invalidate(self, file_path: str | Path) -> None:
        if self._entries.pop(str(file_path), None) is not None:
            self._save()

    def clear(self) -> int:
        """Drop every entry. Returns how many were removed."""
        count = len(self._entries)
        self._entries = {}
        self._save()
        return count

    def _save(self) -> None:
        _write_json(self._path, self._entries)


class TsConfigCache:
    """Maps edited files to their tsconfig, keyed on tsconfig content hashes."""

    def __init__(self, project_root: Path, cache_file: Path | None = None) -> None:
        self._root = project_root
        self._path = cache_file or project_root / CACHE_DIR / TSCONFIG_CACHE_FILE
        self._data = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        data = _load_json(self._path, {})
        for key in ("hashes", "file_to_config"):
            if not isinstance(data.get(key), dict):
                data[key] = {}
        return data

    def _candidates(self) -> list[Path]:
        return [self._root / name for name in TSCONFIG_CANDIDATES]

    def is_valid(self) -> bool:
        """True while every recorded tsconfig still has the same content hash."""
        for config_path, stored in self._data["hashes"].items():
            if sha256_of_file(Path(config_path)) != stored:
                return False
        return True

    def find_config(self, file_path: str) -> Path | None:
        cached = self._data["file_to_config"].get(file_path)
        if isinstance(cached, str) and cached and self.is_valid() and Path(cached).exists():
            return Path(cached)

        self.rebuild()
        for candidate in self._candidates():
            if candidate.exists():
                self._data["file_to_config"][file_path] = str(candidate)
                _write_json(self._path, self._data)
                return candidate
        return None

    def rebuild(self) -> None:
        self._data = {"hashes": {}, "file_to_config": {}}
        for candidate in self._candidates():
            digest = sha256_of_file(candidate)
            if digest:
                self._data["hashes"][str(candidate)] = digest
        _write_json(self._path, self._data)
