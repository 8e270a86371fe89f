"""
資料備份管理

手動備份：將 data.json 複製為 backups/backup_YYYYmmdd_HHMMSS.json。
自動備份：依設定的天數間隔，於每次成功儲存後及背景排程中檢查是否到期。
"""

import logging
import shutil
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vault.errors import StorageError
from vault.storage.json_file import read_json, safe_write_json

logger = logging.getLogger(__name__)

_DAY_MS = 24 * 60 * 60 * 1000


class BackupSettings(BaseModel):
    """settings.json 內容"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    backup_interval_days: int = Field(default=7, ge=0)
    last_backup_at: int = 0  # 毫秒時間戳


class BackupManager:
    """備份管理器"""

    def __init__(
        self,
        data_path: Path,
        backup_dir: Path,
        settings_path: Path,
        clock: Callable[[], float] = time.time,
    ):
        self._data_path = data_path
        self._backup_dir = backup_dir
        self._settings_path = settings_path
        self._clock = clock
        self._lock = threading.Lock()
        backup_dir.mkdir(parents=True, exist_ok=True)
        self._settings = self._load_settings()

    def _load_settings(self) -> BackupSettings:
        if not self._settings_path.exists():
            return BackupSettings()
        try:
            return BackupSettings.model_validate(read_json(self._settings_path))
        except (StorageError, ValueError) as e:
            logger.error("讀取備份設定失敗，使用預設值: %s", e)
            return BackupSettings()

    def _save_settings(self) -> None:
        safe_write_json(self._settings_path, self._settings.model_dump(by_alias=True))

    @property
    def interval_days(self) -> int:
        return self._settings.backup_interval_days

    @property
    def last_backup_at(self) -> int:
        return self._settings.last_backup_at

    def set_interval_days(self, days: int) -> None:
        """更新自動備份間隔（0 表示停用）"""
        if days < 0:
            raise ValueError("備份間隔不可為負數")
        with self._lock:
            self._settings.backup_interval_days = days
            self._save_settings()
        logger.info("自動備份間隔已設定為 %d 天", days)

    def create_backup(self) -> str:
        """複製目前的資料檔，回傳備份檔名"""
        with self._lock:
            return self._create_backup_locked()

    def _create_backup_locked(self) -> str:
        now = self._clock()
        name = f"backup_{datetime.fromtimestamp(now):%Y%m%d_%H%M%S}.json"
        dest = self._backup_dir / name
        try:
            shutil.copyfile(self._data_path, dest)
        except OSError as e:
            logger.error("備份失敗: %s", e)
            raise StorageError(f"備份失敗: {e}") from e
        self._settings.last_backup_at = int(now * 1000)
        self._save_settings()
        logger.info("資料已備份至 %s", dest)
        return name

    def is_backup_due(self) -> bool:
        days = self._settings.backup_interval_days
        if days <= 0:
            return False
        elapsed = int(self._clock() * 1000) - self._settings.last_backup_at
        return elapsed >= days * _DAY_MS

    def maybe_auto_backup(self) -> str | None:
        """到期時執行備份，回傳備份檔名；未到期回傳 None"""
        with self._lock:
            if not self.is_backup_due() or not self._data_path.exists():
                return None
            return self._create_backup_locked()

