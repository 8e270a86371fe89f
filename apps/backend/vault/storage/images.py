"""
附件圖片管理

前端以 data URI（data:image/png;base64,...）上傳圖片，
伺服器寫入上傳目錄並改寫為 /uploads/<檔名>；
資料集不再引用的圖片檔於儲存後刪除。
"""

import base64
import binascii
import logging
import re
import secrets
import time
from pathlib import Path
from typing import Any, Iterable

from vault.errors import InvalidPayloadError, StorageError

logger = logging.getLogger(__name__)

UPLOAD_PREFIX = "/uploads/"

_DATA_URI_RE = re.compile(r"data:image/(\w+);base64,(.+)", re.DOTALL)


def is_inline_image(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("data:image")


def upload_path(upload_dir: Path, reference: str) -> Path:
    """將 /uploads/<檔名> 轉為實際路徑（只取檔名，避免跳脫上傳目錄）"""
    return upload_dir / Path(reference).name


def _new_file_name(ext: str) -> str:
    return f"img_{time.time_ns() // 1_000_000}_{secrets.token_hex(4)}.{ext.lower()}"


def materialize_inline_images(assets: list[dict[str, Any]], upload_dir: Path) -> list[Path]:
    """
    將資產中的 data URI 圖片寫入上傳目錄，並改寫 image 欄位

    Args:
        assets: 資產 dict 清單（會被原地修改）
        upload_dir: 上傳目錄

    Returns:
        本次新寫入的檔案路徑，供後續步驟失敗時清除

    Raises:
        InvalidPayloadError: base64 內容無法解碼
        StorageError: 檔案寫入失敗
    """
    written: list[Path] = []
    try:
        for asset in assets:
            image = asset.get("image")
            if not is_inline_image(image):
                continue
            match = _DATA_URI_RE.fullmatch(image)
            if not match:
                logger.warning("無法辨識的圖片格式，保留原值 (asset=%s)", asset.get("originId"))
                continue

            ext, payload = match.groups()
            try:
                content = base64.b64decode(payload)
            except (binascii.Error, ValueError) as e:
                raise InvalidPayloadError(f"圖片內容無法解碼: {e}") from e

            file_name = _new_file_name(ext)
            path = upload_dir / file_name
            try:
                path.write_bytes(content)
            except OSError as e:
                raise StorageError(f"儲存圖片失敗: {e}") from e
            written.append(path)
            asset["image"] = f"{UPLOAD_PREFIX}{file_name}"
            logger.debug("已儲存圖片 %s (%d bytes)", file_name, len(content))
    except Exception:
        discard_files(written)
        raise
    return written


def referenced_uploads(assets: Iterable[Any]) -> set[str]:
    """資料集中引用的所有已儲存圖片"""
    return {
        asset["image"]
        for asset in assets
        if isinstance(asset, dict)
        and isinstance(asset.get("image"), str)
        and asset["image"].startswith(UPLOAD_PREFIX)
    }


def discard_files(paths: Iterable[Path]) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("刪除檔案失敗 %s: %s", path, e)


def remove_orphans(old_refs: set[str], new_refs: set[str], upload_dir: Path) -> int:
    """刪除舊資料集引用、新資料集已不再引用的圖片，回傳刪除數量"""
    deleted = 0
    for reference in sorted(old_refs - new_refs):
        path = upload_path(upload_dir, reference)
        if not path.exists():
            continue
        try:
            path.unlink()
            deleted += 1
            logger.info("已刪除未使用的圖片檔案: %s", path.name)
        except OSError as e:
            logger.error("刪除圖片失敗 %s: %s", path.name, e)
    return deleted


def reconcile_uploads(assets: list[Any], upload_dir: Path) -> tuple[int, int]:
    """
    校正圖片引用與實際檔案

    - 引用的檔案不存在 → 清空該資產的 image 欄位
    - 上傳目錄中未被引用的檔案 → 刪除

    Returns:
        (清空的引用數, 刪除的檔案數)
    """
    referenced: set[str] = set()
    cleaned = 0
    for asset in assets:
        if not isinstance(asset, dict):
            continue
        image = asset.get("image")
        if not (isinstance(image, str) and UPLOAD_PREFIX in image):
            continue
        path = upload_path(upload_dir, image)
        if path.is_file():
            referenced.add(path.name)
        else:
            asset["image"] = ""
            cleaned += 1

    deleted = 0
    for path in upload_dir.iterdir():
        if not path.is_file() or path.name in referenced:
            continue
        try:
            path.unlink()
            deleted += 1
        except OSError as e:
            logger.error("刪除檔案失敗 %s: %s", path.name, e)
    return cleaned, deleted
