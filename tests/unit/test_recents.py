"""Tests for the recency store."""

from __future__ import annotations

import itertools
import json
from pathlib import Path
from typing import Any

from kai.core.config import KaiConfig, RecentDirectory, load_config, save_config
from kai.core.recents import RecencyStore, add_recent
from kai.core.result import Err, Ok


def _counter(start: int = 1000) -> itertools.count[int]:
    return itertools.count(start, 10)


class TestAddRecent:
    def test_prepends_new_entry(self) -> None:
        existing = [RecentDirectory(path="/a", name="a", accessed_at=1)]
        updated = add_recent(existing, "/b", "b", accessed_at=2, limit=10)
        assert [entry.path for entry in updated] == ["/b", "/a"]

    def test_repeat_visit_moves_to_front(self) -> None:
        existing = [
            RecentDirectory(path="/b", name="b", accessed_at=2),
            RecentDirectory(path="/a", name="a", accessed_at=1),
        ]
        updated = add_recent(existing, "/a", "a", accessed_at=3, limit=10)
        assert [entry.path for entry in updated] == ["/a", "/b"]
        assert updated[0].accessed_at == 3

    def test_truncates_to_limit(self) -> None:
        existing = [RecentDirectory(path=f"/{i}", name=str(i), accessed_at=i) for i in range(5)]
        updated = add_recent(existing, "/new", "new", accessed_at=10, limit=3)
        assert [entry.path for entry in updated] == ["/new", "/0", "/1"]

    def test_timestamp_never_goes_backwards(self) -> None:
        existing = [RecentDirectory(path="/a", name="a", accessed_at=500)]
        updated = add_recent(existing, "/b", "b", accessed_at=100, limit=10)
        assert updated[0].accessed_at == 500


class TestRecencyStore:
    def test_record_visit_persists(self, isolate_config: Path) -> None:
        config, meta = load_config()
        store = RecencyStore(config, meta.path, clock=_counter().__next__)

        result = store.record_visit("/work/foo", "foo")

        assert isinstance(result, Ok)
        assert result.value.path == "/work/foo"
        saved = json.loads(isolate_config.read_text(encoding="utf-8"))
        assert saved["recentDirs"] == [{"path": "/work/foo", "name": "foo", "accessedAt": 1000}]
        assert store.lookup("/work/foo") == RecentDirectory(path="/work/foo", name="foo", accessed_at=1000)
        assert store.lookup("/work/bar") is None

    def test_record_visit_is_idempotent_on_path(self, isolate_config: Path) -> None:
        config, meta = load_config()
        store = RecencyStore(config, meta.path, clock=_counter().__next__)

        store.record_visit("/a", "a")
        store.record_visit("/b", "b")
        store.record_visit("/a", "a")

        reloaded, _ = load_config()
        assert [entry.path for entry in reloaded.recent_dirs] == ["/a", "/b"]
        assert reloaded.recent_dirs[0].accessed_at == 1020

    def test_capacity_comes_from_the_file(self, isolate_config: Path) -> None:
        save_config(KaiConfig(max_recents=2), isolate_config)
        config, meta = load_config()
        store = RecencyStore(config, meta.path, clock=_counter().__next__)

        for name in ("a", "b", "c", "d"):
            store.record_visit(f"/{name}", name)

        assert [entry.path for entry in store.entries] == ["/d", "/c"]

    def test_keeps_visits_from_other_sessions(self, isolate_config: Path) -> None:
        config, meta = load_config()
        store = RecencyStore(config, meta.path, clock=_counter().__next__)
        other = RecencyStore(config, meta.path, clock=_counter(5000).__next__)

        other.record_visit("/other", "other")
        store.record_visit("/mine", "mine")

        assert [entry.path for entry in store.entries] == ["/mine", "/other"]

    def test_in_memory_overrides_are_not_persisted(self, isolate_config: Path, tmp_path: Path) -> None:
        config, meta = load_config()
        overridden = config.model_copy(update={"projects_dir": tmp_path / "elsewhere"})
        store = RecencyStore(overridden, meta.path, clock=_counter().__next__)

        store.record_visit("/a", "a")

        saved = json.loads(isolate_config.read_text(encoding="utf-8"))
        assert saved["projectsDir"] == str(config.projects_dir)
        assert store.config.projects_dir == tmp_path / "elsewhere"

    def test_save_failure_is_reported(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        config_path = blocker / "config.json"
        store = RecencyStore(KaiConfig(), config_path, clock=_counter().__next__)

        result = store.record_visit("/a", "a")

        assert isinstance(result, Err)
        assert "Failed to save" in result.error.message
        assert store.lookup("/a") is None

    def test_env_overrides_are_not_persisted(self, isolate_config: Path, monkeypatch: Any) -> None:
        isolate_config.parent.mkdir(parents=True)
        isolate_config.write_text(json.dumps({"projectsDir": "/home/me/code"}), encoding="utf-8")
        monkeypatch.setenv("KAI_PROJECTS_DIR", "/tmp/oneoff")
        monkeypatch.setenv("KAI_MAX_RECENTS", "1")
        config, meta = load_config()
        store = RecencyStore(config, meta.path, clock=_counter().__next__)

        store.record_visit("/a", "a")
        store.record_visit("/b", "b")

        saved = json.loads(isolate_config.read_text(encoding="utf-8"))
        assert saved["projectsDir"] == "/home/me/code"
        assert "maxRecents" not in saved
        assert [item["path"] for item in saved["recentDirs"]] == ["/b"]

    def test_broken_file_is_left_alone(self, isolate_config: Path) -> None:
        isolate_config.parent.mkdir(parents=True)
        isolate_config.write_text("{broken", encoding="utf-8")
        config, meta = load_config()
        store = RecencyStore(config, meta.path, clock=_counter().__next__)

        result = store.record_visit("/a", "a")

        assert isinstance(result, Err)
        assert "invalid" in result.error.message
        assert isolate_config.read_text(encoding="utf-8") == "{broken"
        assert store.lookup("/a") is None
