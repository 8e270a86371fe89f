"""
JSON 檔案讀寫

原子寫入：先寫入同目錄的暫存檔並 fsync，再以 os.replace 取代目標檔，
讀取端永遠不會看到寫到一半的檔案。
"""

import json
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Any

from vault.errors import StorageError

logger = logging.getLogger(__name__)


def safe_write_json(path: Path, data: Any) -> None:
    """原子寫入 JSON 檔，失敗時清除暫存檔並拋出 StorageError"""
    tmp_path = path.with_name(f"{path.name}.tmp-{time.time_ns()}-{secrets.token_hex(4)}")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as e:
        tmp_path.unlink(missing_ok=True)
        raise StorageError(f"寫入 {path.name} 失敗: {e}") from e


def read_json(path: Path) -> Any:
    """讀取 JSON 檔，檔案不存在或內容損毀時拋出 StorageError"""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise StorageError(f"讀取 {path.name} 失敗: {e}") from e
