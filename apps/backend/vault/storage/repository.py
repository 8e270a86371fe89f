"""
資料集儲存庫

伺服器端唯一接觸 data.json 與上傳目錄的元件。

儲存流程：
1. 補齊缺少的頂層清單欄位
2. 將 data URI 圖片寫入上傳目錄並改寫引用
3. 原子寫入 data.json（暫存檔 + rename）
4. 刪除舊資料集引用、新資料集不再引用的圖片（盡力而為）

資料檔先寫入、再刪除圖片，中途當機最多留下孤兒檔案，
不會出現引用中的圖片被刪除的情況。
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from vault.errors import InvalidPayloadError, StorageError
from vault.schemas.dataset import DatasetPayload, default_dataset
from vault.storage.images import (
    discard_files,
    materialize_inline_images,
    reconcile_uploads,
    referenced_uploads,
    remove_orphans,
)
from vault.storage.json_file import read_json, safe_write_json

logger = logging.getLogger(__name__)


@dataclass
class SaveResult:
    """單次儲存的圖片異動"""
    images_written: int = 0
    images_deleted: int = 0


class DataRepository:
    """資料集儲存庫"""

    def __init__(self, data_path: Path, upload_dir: Path):
        self.data_path = data_path
        self.upload_dir = upload_dir
        # 同一行程內的讀改寫互斥；多行程 / 多客戶端仍為最後寫入者勝出
        self._lock = threading.Lock()

    def ensure_initialized(self) -> None:
        """建立資料目錄；資料檔不存在時寫入預設資料集"""
        self.data_path.parent.mkdir(parents=True, exist_ok=True)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        if not self.data_path.exists():
            safe_write_json(self.data_path, default_dataset())
            logger.info("✅ 已建立預設資料檔: %s", self.data_path)

    def read(self) -> dict[str, Any]:
        """讀取完整資料集（首次存取時自動建立預設資料）"""
        with self._lock:
            self.ensure_initialized()
            data = read_json(self.data_path)
        if not isinstance(data, dict):
            raise StorageError("資料檔格式錯誤: 頂層不是 JSON 物件")
        return data

    def save(self, payload: Any) -> SaveResult:
        """
        儲存完整資料集

        Raises:
            InvalidPayloadError: 請求內容不是 JSON 物件或圖片無法解碼
            StorageError: 圖片或資料檔寫入失敗
        """
        if not isinstance(payload, dict):
            raise InvalidPayloadError("無效的資料格式")
        try:
            document = DatasetPayload.model_validate(payload).to_document()
        except ValidationError as e:
            raise InvalidPayloadError(f"無效的資料格式: {e}") from e

        with self._lock:
            self.ensure_initialized()
            old_refs = self._previous_references()

            written = materialize_inline_images(document["assets"], self.upload_dir)
            try:
                safe_write_json(self.data_path, document)
            except StorageError:
                discard_files(written)
                raise

            new_refs = referenced_uploads(document["assets"])
            deleted = remove_orphans(old_refs, new_refs, self.upload_dir)

        logger.info(
            "資料已儲存: %d 筆資產, 新增圖片 %d, 刪除圖片 %d",
            len(document["assets"]), len(written), deleted,
        )
        return SaveResult(images_written=len(written), images_deleted=deleted)

    def reset(self) -> None:
        """以預設資料集取代目前資料"""
        with self._lock:
            self.data_path.parent.mkdir(parents=True, exist_ok=True)
            safe_write_json(self.data_path, default_dataset())
        logger.info("資料已重置為預設值")

    def fix(self) -> tuple[int, int]:
        """
        校正圖片引用：清空指向不存在檔案的引用，刪除未被引用的檔案

        Returns:
            (清空的引用數, 刪除的檔案數)
        """
        with self._lock:
            self.ensure_initialized()
            data = read_json(self.data_path)
            if not isinstance(data, dict):
                raise StorageError("資料檔格式錯誤: 頂層不是 JSON 物件")
            if not isinstance(data.get("assets"), list):
                data["assets"] = []

            cleaned, deleted = reconcile_uploads(data["assets"], self.upload_dir)
            safe_write_json(self.data_path, data)

        logger.info("圖片引用校正完成: 清空 %d 筆引用, 刪除 %d 個檔案", cleaned, deleted)
        return cleaned, deleted

    def _previous_references(self) -> set[str]:
        """讀取目前資料檔中的圖片引用；讀取失敗時視為沒有引用"""
        try:
            previous = read_json(self.data_path)
        except StorageError as e:
            logger.error("讀取舊資料時出錯: %s", e)
            return set()
        if not isinstance(previous, dict) or not isinstance(previous.get("assets"), list):
            return set()
        return referenced_uploads(previous["assets"])
