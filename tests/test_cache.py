"""Tests for the type-check result and tsconfig caches."""

import json

from toolhooks.cache import (
    RESULT_TTL_SECONDS,
    TsConfigCache,
    TypeCheckResultsCache,
    sha256_of_file,
)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestResultsCache:
    def test_hit_for_unchanged_file(self, tmp_path):
        source = tmp_path / "a.ts"
        source.write_text("const a = 1\n")
        cache = TypeCheckResultsCache(tmp_path / "cache.json", clock=FakeClock())

        cache.set(source, {"success": True})
        assert cache.get(source) == {"success": True}

    def test_persists_across_instances(self, tmp_path):
        source = tmp_path / "a.ts"
        source.write_text("const a = 1\n")
        clock = FakeClock()
        TypeCheckResultsCache(tmp_path / "cache.json", clock=clock).set(source, {"success": False})

        reloaded = TypeCheckResultsCache(tmp_path / "cache.json", clock=clock)
        assert reloaded.get(source) == {"success": False}
        entry = reloaded.entries[str(source)]
        assert entry["hash"] == sha256_of_file(source)
        assert entry["timestamp"] == clock.now

    def test_miss_after_content_change(self, tmp_path):
        source = tmp_path / "a.ts"
        source.write_text("const a = 1\n")
        cache = TypeCheckResultsCache(tmp_path / "cache.json", clock=FakeClock())
        cache.set(source, {"success": True})

        source.write_text("const a = 2\n")
        assert cache.get(source) is None

    def test_expires_after_ttl(self, tmp_path):
        source = tmp_path / "a.ts"
        source.write_text("x")
        clock = FakeClock()
        cache = TypeCheckResultsCache(tmp_path / "cache.json", clock=clock)
        cache.set(source, {"success": True})

        clock.now += RESULT_TTL_SECONDS - 1
        assert cache.get(source) == {"success": True}
        clock.now += 1
        assert cache.get(source) is None

    def test_missing_file_is_a_miss(self, tmp_path):
        cache = TypeCheckResultsCache(tmp_path / "cache.json")
        assert cache.get(tmp_path / "nope.ts") is None

    def test_set_ignores_unreadable_file(self, tmp_path):
        cache = TypeCheckResultsCache(tmp_path / "cache.json")
        cache.set(tmp_path / "nope.ts", {"success": True})
        assert cache.entries == {}

    def test_invalidate_and_clear(self, tmp_path):
        a, b = tmp_path / "a.ts", tmp_path / "b.ts"
        a.write_text("a")
        b.write_text("b")
        cache = TypeCheckResultsCache(tmp_path / "cache.json")
        cache.set(a, {"success": True})
        cache.set(b, {"success": True})

        cache.invalidate(a)
        assert cache.get(a) is None
        assert cache.clear() == 1
        assert json.loads((tmp_path / "cache.json").read_text()) == {}

    def test_corrupt_cache_file_starts_empty(self, tmp_path):
        (tmp_path / "cache.json").write_text("{not json")
        cache = TypeCheckResultsCache(tmp_path / "cache.json")
        assert cache.entries == {}

    def test_non_dict_entry_is_a_miss(self, tmp_path):
        source = tmp_path / "a.ts"
        source.write_text("x")
        (tmp_path / "cache.json").write_text(json.dumps({str(source): "garbage"}))
        cache = TypeCheckResultsCache(tmp_path / "cache.json")
        assert cache.get(source) is None

        cache.set(source, {"success": True})
        assert cache.get(source) == {"success": True}

    def test_bad_timestamp_is_a_miss(self, tmp_path):
        source = tmp_path / "a.ts"
        source.write_text("x")
        entry = {"hash": sha256_of_file(source), "timestamp": "abc", "result": {"success": True}}
        (tmp_path / "cache.json").write_text(json.dumps({str(source): entry}))
        assert TypeCheckResultsCache(tmp_path / "cache.json").get(source) is None

    def test_non_dict_result_is_a_miss(self, tmp_path):
        source = tmp_path / "a.ts"
        source.write_text("x")
        clock = FakeClock()
        entry = {"hash": sha256_of_file(source), "timestamp": clock.now, "result": [1]}
        (tmp_path / "cache.json").write_text(json.dumps({str(source): entry}))
        assert TypeCheckResultsCache(tmp_path / "cache.json", clock=clock).get(source) is None

    def test_for_project_location(self, tmp_path):
        cache = TypeCheckResultsCache.for_project(tmp_path)
        assert cache.path == tmp_path / ".toolhooks" / "cache" / "typecheck-results.json"


class TestTsConfigCache:
    def test_finds_root_tsconfig(self, tmp_path):
        (tmp_path / "tsconfig.json").write_text("{}")
        cache = TsConfigCache(tmp_path)
        assert cache.find_config("src/a.ts") == tmp_path / "tsconfig.json"
        assert cache.is_valid() is True

    def test_falls_back_to_app_config(self, tmp_path):
        (tmp_path / "tsconfig.app.json").write_text("{}")
        assert TsConfigCache(tmp_path).find_config("src/a.ts") == tmp_path / "tsconfig.app.json"

    def test_no_tsconfig(self, tmp_path):
        assert TsConfigCache(tmp_path).find_config("src/a.ts") is None

    def test_edit_to_tsconfig_invalidates(self, tmp_path):
        tsconfig = tmp_path / "tsconfig.json"
        tsconfig.write_text("{}")
        cache = TsConfigCache(tmp_path)
        cache.find_config("src/a.ts")

        tsconfig.write_text('{"compilerOptions": {}}')
        assert TsConfigCache(tmp_path).is_valid() is False

    def test_mapping_persisted(self, tmp_path):
        (tmp_path / "tsconfig.json").write_text("{}")
        cache = TsConfigCache(tmp_path)
        cache.find_config("src/a.ts")
        data = json.loads(cache.path.read_text())
        assert data["file_to_config"] == {"src/a.ts": str(tmp_path / "tsconfig.json")}
        assert str(tmp_path / "tsconfig.json") in data["hashes"]

    def test_wrong_shape_cache_file_recovers(self, tmp_path):
        (tmp_path / "tsconfig.json").write_text("{}")
        cache_file = tmp_path / "tsconfig-cache.json"
        cache_file.write_text(json.dumps({"hashes": [], "file_to_config": "x"}))
        cache = TsConfigCache(tmp_path, cache_file)
        assert cache.is_valid() is True
        assert cache.find_config("src/a.ts") == tmp_path / "tsconfig.json"

    def test_non_string_mapping_ignored(self, tmp_path):
        (tmp_path / "tsconfig.json").write_text("{}")
        cache_file = tmp_path / "tsconfig-cache.json"
        cache_file.write_text(json.dumps({"hashes": {}, "file_to_config": {"src/a.ts": 42}}))
        assert TsConfigCache(tmp_path, cache_file).find_config("src/a.ts") == tmp_path / "tsconfig.json"
