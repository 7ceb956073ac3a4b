"""
Unit tests for the file-backed inventory store.

Tests round-trips, on-disk format, permissions, and corruption handling.
"""

import json
import os
import stat
from datetime import datetime, timezone

import pytest

from core.errors import InventoryCorruptError
from core.inventory.store import InventoryStore
from core.models.projects import Inventory, Project

PINNED = datetime(2026, 2, 13, 0, 0, 0, tzinfo=timezone.utc)


def make_project(path: str) -> Project:
    return Project(id=path, path=path, added_at="2026-02-13T00:00:00Z")


class TestInventoryStore:
    """Test suite for InventoryStore"""

    @pytest.fixture
    def store(self, tmp_path):
        return InventoryStore(tmp_path / "workspace", clock=lambda: PINNED)

    def test_load_missing_file_returns_empty(self, store):
        """Test a missing inventory file is an empty inventory"""
        inventory = store.load()

        assert inventory.projects == []
        assert not store.path.exists()

    def test_round_trip(self, store):
        """Test save followed by load yields the same project set"""
        projects = [make_project("/b/repo"), make_project("/a/repo"), make_project("/c/repo")]

        store.save(Inventory(projects=projects))
        loaded = store.load()

        assert {p.id for p in loaded.projects} == {p.id for p in projects}
        assert set(loaded.projects) == set(projects)

    def test_file_format(self, store):
        """Test version, updated_at, key names, and path ordering on disk"""
        store.save(Inventory(projects=[make_project("/z/repo"), make_project("/a/repo")]))

        data = json.loads(store.path.read_text())

        assert data["version"] == 1
        assert data["updated_at"] == "2026-02-13T00:00:00Z"
        assert [p["Path"] for p in data["projects"]] == ["/a/repo", "/z/repo"]
        assert data["projects"][0] == {
            "ID": "/a/repo",
            "Path": "/a/repo",
            "AddedAt": "2026-02-13T00:00:00Z",
        }

    def test_repeated_saves_are_byte_stable(self, store):
        """Test saving the same set in any order writes identical bytes"""
        first = [make_project("/b"), make_project("/a")]
        store.save(Inventory(projects=first))
        body_one = store.path.read_bytes()

        store.save(Inventory(projects=list(reversed(first))))
        body_two = store.path.read_bytes()

        assert body_one == body_two

    def test_file_and_directory_permissions(self, store):
        """Test inventory file is 0600 and its directory at most 0750"""
        old_umask = os.umask(0)
        try:
            store.save(Inventory(projects=[make_project("/a")]))
        finally:
            os.umask(old_umask)

        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600
        assert stat.S_IMODE(store.path.parent.stat().st_mode) == 0o750

    def test_existing_file_mode_tightened(self, store):
        """Test an existing, looser file is rewritten as 0600"""
        store.path.parent.mkdir(parents=True)
        store.path.write_text('{"version": 1, "projects": []}')
        os.chmod(store.path, 0o644)

        store.save(Inventory())

        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600

    def test_corrupt_body_raises(self, store):
        """Test malformed JSON surfaces as InventoryCorruptError"""
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{broken")

        with pytest.raises(InventoryCorruptError, match="inventory parse error"):
            store.load()

    def test_non_utf8_body_raises(self, store):
        """Test undecodable bytes surface as InventoryCorruptError"""
        store.path.parent.mkdir(parents=True)
        store.path.write_bytes(b'\xff\xfe{"version":1}\xc3')

        with pytest.raises(InventoryCorruptError, match="inventory parse error"):
            store.load()

    def test_wrong_shape_raises(self, store):
        """Test a JSON document of the wrong shape is corruption"""
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({"projects": [{"ID": "/a"}]}))

        with pytest.raises(InventoryCorruptError):
            store.load()

    def test_lowercase_keys_accepted(self, store):
        """Test inventories written with lowercase keys still load"""
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({
            "version": 1,
            "updated_at": "2026-01-01T00:00:00Z",
            "projects": [{"id": "/a", "path": "/a", "added_at": "2026-01-01T00:00:00Z"}],
        }))

        loaded = store.load()

        assert loaded.projects == [Project(id="/a", path="/a", added_at="2026-01-01T00:00:00Z")]
