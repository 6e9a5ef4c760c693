"""Tests for the SQLite configuration store."""

import json

import pytest

from api_forward.models.endpoints import Snapshot, UrlConstruction
from api_forward.store import ConfigStore


@pytest.fixture
def store(tmp_path) -> ConfigStore:
    return ConfigStore(
        db_path=tmp_path / "data" / "config.db",
        backup_path=tmp_path / "config.json",
    )


@pytest.fixture
def sample_snapshot() -> Snapshot:
    return Snapshot.model_validate(
        {
            "apiUrls": {
                "moe": {
                    "group": "二次元图片",
                    "description": "萌版横图",
                    "url": "https://t.example/moe",
                    "method": "redirect",
                    "type": "image",
                    "queryParams": [
                        {"name": "size", "required": True, "validValues": ["s", "l"]},
                        {"name": "fmt", "description": "format", "defaultValue": "png"},
                    ],
                },
                "draw": {
                    "group": "AI绘图",
                    "url": "https://draw.example/prompt/",
                    "method": "redirect",
                    "urlConstruction": "special_pollinations",
                    "modelName": "flux",
                },
                "random": {
                    "url": "https://api.example/random",
                    "method": "proxy",
                    "type": "video",
                    "proxySettings": {
                        "imageUrlField": "data.url",
                        "imageUrlFieldFromParam": True,
                        "fallbackAction": "error",
                    },
                },
            },
            "baseTag": "masterpiece",
        }
    )


def test_creates_database_directory(tmp_path):
    """The database directory is created on demand."""
    ConfigStore(db_path=tmp_path / "nested" / "dir" / "config.db")
    assert (tmp_path / "nested" / "dir" / "config.db").exists()


def test_empty_store_loads_empty_snapshot(store):
    """No rows and no backup give an empty snapshot."""
    snapshot = store.load()
    assert snapshot.endpoints == {}
    assert snapshot.base_tag == ""


def test_save_then_load(store, sample_snapshot):
    """Saved snapshots load back equal."""
    store.save(sample_snapshot)
    loaded = store.load()
    assert loaded == sample_snapshot
    assert loaded.endpoints["draw"].url_construction is UrlConstruction.SPECIAL_POLLINATIONS
    assert [p.name for p in loaded.endpoints["moe"].query_params] == ["size", "fmt"]


def test_save_removes_dropped_endpoints(store, sample_snapshot):
    """Endpoints missing from a new snapshot are deleted."""
    store.save(sample_snapshot)
    smaller = Snapshot.model_validate(
        {"apiUrls": {"moe": {"url": "https://t.example/moe2", "method": "redirect"}}}
    )
    store.save(smaller)

    loaded = store.load()
    assert list(loaded.endpoints) == ["moe"]
    assert loaded.endpoints["moe"].url == "https://t.example/moe2"
    assert loaded.endpoints["moe"].query_params == []


def test_save_writes_backup(store, sample_snapshot, tmp_path):
    """A JSON copy is written after saving."""
    store.save(sample_snapshot)
    backup = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
    assert backup["baseTag"] == "masterpiece"
    assert backup["apiUrls"]["draw"]["modelName"] == "flux"


def test_load_from_backup_when_database_empty(tmp_path, sample_snapshot):
    """The backup file seeds an empty database's snapshot."""
    backup = tmp_path / "config.json"
    backup.write_text(json.dumps(sample_snapshot.to_wire()), encoding="utf-8")
    store = ConfigStore(db_path=tmp_path / "config.db", backup_path=backup)
    assert store.load() == sample_snapshot


def test_file_operations_disabled(tmp_path, sample_snapshot):
    """No backup file is written when file operations are off."""
    store = ConfigStore(
        db_path=tmp_path / "config.db",
        backup_path=tmp_path / "config.json",
        enable_file_operations=False,
    )
    store.save(sample_snapshot)
    store.load()
    assert not (tmp_path / "config.json").exists()
