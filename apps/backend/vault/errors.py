"""
AssetVault 例外定義

客戶端資料倉庫與伺服器端持久層共用的錯誤分類。
"""


class VaultError(Exception):
    """所有 AssetVault 錯誤的基礎類別"""
    pass


# === 客戶端資料倉庫 ===

class LoadError(VaultError):
    """初次載入資料失敗，資料倉庫維持未初始化狀態"""
    pass


class AssetValidationError(VaultError):
    """資產資料不合法（缺少名稱、更新不存在的 ID 等），操作已中止"""
    pass


class PersistenceError(VaultError):
    """遠端寫入失敗；本地記憶體中的變更仍然保留"""
    pass


class StoreNotReadyError(VaultError):
    """資料倉庫尚未載入完成即嘗試修改"""
    pass


# === 伺服器端持久層 ===

class InvalidPayloadError(VaultError):
    """請求內容格式錯誤（對應 HTTP 400）"""
    pass


class StorageError(VaultError):
    """檔案寫入、更名或圖片儲存失敗（對應 HTTP 500）"""
    pass
