"""
格式化工具

金額正規化、ID 生成、日期壓縮等共用函式。
"""

import math
import re
import secrets
import string
import time
from typing import Any

# 完整的十進位數字（不含單位）
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
# 字串開頭的數字前綴（"12.5abc" → "12.5"）
_LEADING_NUMBER_RE = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_ISO_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")

_BASE36 = string.digits + string.ascii_lowercase

ID_PREFIX = "ID_"


def _split_unit(value: str) -> tuple[str, str]:
    """拆出數字部分與 "/單位" 後綴"""
    slash = value.find("/")
    if slash < 0:
        return value, ""
    return value[:slash].strip(), value[slash:]


def normalize_amount(value: Any) -> str:
    """
    金額統一保留兩位小數，保留 "/單位" 後綴

    例：
        "12.5"  → "12.50"
        "99/月" → "99.00/月"
        "abc"   → "abc"（無法解析時保持原樣）
        "/月"   → "0.00/月"（只有單位時數字視為 0）
    """
    if value is None:
        return ""
    text = str(value).strip()
    if not text:
        return ""

    number_part, unit_part = _split_unit(text)
    if not number_part and unit_part:
        number_part = "0"
    if not _DECIMAL_RE.fullmatch(number_part):
        return text

    number = float(number_part)
    if not math.isfinite(number):
        return text
    if round(number, 2) == 0:
        number = 0.0  # 避免輸出 "-0.00"
    return f"{number:.2f}{unit_part}"


def parse_amount(value: Any) -> float:
    """取出金額的數字前綴（忽略 "/單位"），無法解析時回傳 0"""
    if value is None:
        return 0.0
    number_part, _ = _split_unit(str(value))
    match = _LEADING_NUMBER_RE.match(number_part)
    if not match:
        return 0.0
    return float(match.group(1))


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id(existing_ids: set[str]) -> str:
    """
    產生不與 existing_ids 重複的資產 ID，並立即登記到集合中

    格式：ID_<毫秒時間戳 base36>_<4 碼亂數>，例如 ID_la3k9j2_p6pf
    """
    while True:
        stamp = _to_base36(time.time_ns() // 1_000_000)
        suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
        new_id = f"{ID_PREFIX}{stamp}_{suffix}"
        if new_id not in existing_ids:
            existing_ids.add(new_id)
            return new_id


def format_compact_date(iso_date: str | None) -> str:
    """將 YYYY-MM-DD 轉為 YYMMDD，格式錯誤時回傳空字串"""
    if not iso_date:
        return ""
    match = _ISO_DATE_RE.fullmatch(iso_date.strip())
    if not match:
        return ""
    year, month, day = match.groups()
    return f"{year[2:]}{month}{day}"
