"""備份管理測試"""

import json

import pytest

from vault.errors import StorageError
from vault.storage.backup import BackupManager

from conftest import FIXED_NOW

DAY = 24 * 60 * 60


def make_manager(tmp_path, now=FIXED_NOW) -> BackupManager:
    return BackupManager(
        tmp_path / "data.json",
        tmp_path / "backups",
        tmp_path / "settings.json",
        clock=lambda: now,
    )


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "data.json"
    path.write_text('{"assets": []}', encoding="utf-8")
    return path


def test_create_backup_copies_data_file(tmp_path, data_file):
    manager = make_manager(tmp_path)
    name = manager.create_backup()

    assert name == "backup_20260102_030405.json"
    assert (tmp_path / "backups" / name).read_text(encoding="utf-8") == '{"assets": []}'
    assert manager.last_backup_at == int(FIXED_NOW * 1000)


def test_create_backup_without_data_file_fails(tmp_path):
    with pytest.raises(StorageError):
        make_manager(tmp_path).create_backup()


def test_auto_backup_respects_interval(tmp_path, data_file):
    manager = make_manager(tmp_path)
    manager.set_interval_days(3)

    assert manager.maybe_auto_backup() is not None
    assert manager.maybe_auto_backup() is None

    later = make_manager(tmp_path, now=FIXED_NOW + 3 * DAY)
    assert later.is_backup_due()
    assert make_manager(tmp_path, now=FIXED_NOW + 2 * DAY).maybe_auto_backup() is None


def test_zero_interval_disables_auto_backup(tmp_path, data_file):
    manager = make_manager(tmp_path)
    manager.set_interval_days(0)

    assert manager.maybe_auto_backup() is None
    assert list((tmp_path / "backups").iterdir()) == []


def test_settings_are_persisted(tmp_path):
    make_manager(tmp_path).set_interval_days(14)

    saved = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert saved == {"backupIntervalDays": 14, "lastBackupAt": 0}
    assert make_manager(tmp_path).interval_days == 14


def test_negative_interval_rejected(tmp_path):
    with pytest.raises(ValueError):
        make_manager(tmp_path).set_interval_days(-1)


def test_corrupted_settings_fall_back_to_defaults(tmp_path):
    (tmp_path / "settings.json").write_text("not json", encoding="utf-8")
    assert make_manager(tmp_path).interval_days == 7
