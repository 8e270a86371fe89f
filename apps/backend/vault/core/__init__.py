"""客戶端資產資料倉庫：資料模型、組合資產、篩選與持久化"""

from vault.core.backend import DatasetBackend, HttpDatasetBackend
from vault.core.models import Asset, StoreState
from vault.core.store import AssetStore, StoreStatus

__all__ = [
    "Asset",
    "AssetStore",
    "DatasetBackend",
    "HttpDatasetBackend",
    "StoreState",
    "StoreStatus",
]
