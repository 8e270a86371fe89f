"""伺服器端持久層：資料檔、附件圖片與備份"""

from vault.storage.backup import BackupManager
from vault.storage.repository import DataRepository, SaveResult

__all__ = ["BackupManager", "DataRepository", "SaveResult"]
