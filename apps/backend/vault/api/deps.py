"""
API 依賴注入

儲存庫與備份管理器於首次使用時依設定建立，測試時可透過
app.dependency_overrides 替換。
"""

from functools import lru_cache

from vault.config import get_settings
from vault.storage.backup import BackupManager
from vault.storage.repository import DataRepository


@lru_cache
def get_repository() -> DataRepository:
    """取得資料集儲存庫"""
    settings = get_settings()
    return DataRepository(settings.data_path, settings.upload_dir)


@lru_cache
def get_backup_manager() -> BackupManager:
    """取得備份管理器"""
    settings = get_settings()
    return BackupManager(settings.data_path, settings.backup_dir, settings.settings_path)
