"""共用測試夾具"""

import copy
from datetime import datetime
from typing import Any

import pytest
from fastapi.testclient import TestClient

from vault.api.deps import get_backup_manager, get_repository
from vault.core.backend import DatasetBackend
from vault.core.store import AssetStore
from vault.errors import LoadError, PersistenceError
from vault.main import app
from vault.schemas.dataset import default_dataset
from vault.storage.backup import BackupManager
from vault.storage.repository import DataRepository

FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5).timestamp()


class MemoryBackend(DatasetBackend):
    """記憶體中的資料集，記錄每次儲存內容"""

    def __init__(self, data: dict[str, Any] | None = None):
        self.data = data if data is not None else default_dataset()
        self.saved: list[dict[str, Any]] = []
        self.fail_fetch = False
        self.fail_save = False
        self.closed = False

    def fetch(self) -> dict[str, Any]:
        if self.fail_fetch:
            raise LoadError("連線失敗")
        return copy.deepcopy(self.data)

    def save(self, payload: dict[str, Any]) -> None:
        if self.fail_save:
            raise PersistenceError("伺服器無回應")
        self.saved.append(copy.deepcopy(payload))
        self.data = copy.deepcopy(payload)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> AssetStore:
    store = AssetStore(backend, save_debounce=0, clock=lambda: 1_000)
    store.load()
    return store


@pytest.fixture
def repo(tmp_path) -> DataRepository:
    return DataRepository(tmp_path / "data.json", tmp_path / "uploads")


@pytest.fixture
def backups(tmp_path) -> BackupManager:
    return BackupManager(
        tmp_path / "data.json",
        tmp_path / "backups",
        tmp_path / "settings.json",
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def client(repo: DataRepository, backups: BackupManager):
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_backup_manager] = lambda: backups
    yield TestClient(app)
    app.dependency_overrides.clear()
