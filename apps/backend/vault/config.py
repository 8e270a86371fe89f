"""
AssetVault 後端設定模組

使用 Pydantic Settings 管理環境變數，自動驗證型別與預設值。
"""

import re
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

# 容量單位對應位元組數
_SIZE_UNITS: dict[str, int] = {
    "": 1,
    "b": 1,
    "kb": 1024,
    "mb": 1024 ** 2,
    "gb": 1024 ** 3,
}


def parse_size(value: str) -> int:
    """將 "50mb"、"100kb"、"1024" 等字串轉為位元組數"""
    match = re.fullmatch(r"\s*(\d+(?:\.\d+)?)\s*([a-zA-Z]*)\s*", value)
    if not match:
        raise ValueError(f"無法解析的容量設定: {value!r}")
    number, unit = match.groups()
    unit = unit.lower()
    if unit not in _SIZE_UNITS:
        raise ValueError(f"未知的容量單位: {unit!r}")
    return int(float(number) * _SIZE_UNITS[unit])


class Settings(BaseSettings):
    """應用程式設定，透過環境變數或 .env 載入"""

    # === 應用程式 ===
    app_env: Literal["development", "production", "testing"] = "development"
    app_name: str = "AssetVault API"
    app_version: str = "0.1.0"
    log_level: Literal["debug", "info", "warning", "error"] = "info"

    # === 資料儲存 ===
    data_dir: Path = Path("data")
    json_limit: str = "50mb"  # 單次請求的最大資料量
    backup_check_minutes: int = 60  # 自動備份檢查間隔

    # === 前端預設行為 ===
    default_dark: bool = False
    default_auto_save: bool = False
    default_debug: bool = False
    font_url: str = ""

    # === 客戶端資料倉庫 ===
    api_base_url: str = "http://localhost:3000/api"
    api_timeout: float = 10.0
    save_debounce_seconds: float = 0.8

    # === CORS ===
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def json_limit_bytes(self) -> int:
        """回傳請求大小上限（位元組）"""
        return parse_size(self.json_limit)

    @property
    def data_path(self) -> Path:
        return self.data_dir / "data.json"

    @property
    def upload_dir(self) -> Path:
        return self.data_dir / "uploads"

    @property
    def backup_dir(self) -> Path:
        return self.data_dir / "backups"

    @property
    def settings_path(self) -> Path:
        """備份設定檔（備份間隔與上次備份時間）"""
        return self.data_dir / "settings.json"


@lru_cache
def get_settings() -> Settings:
    """取得快取的設定實例"""
    return Settings()
