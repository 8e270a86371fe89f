"""
資料集持久層客戶端

定義資料倉庫與伺服器端持久層之間的介面，
預設實作透過 httpx 呼叫 /api/data。
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from vault.errors import LoadError, PersistenceError

logger = logging.getLogger(__name__)


class DatasetBackend(ABC):
    """
    資料集持久層抽象類別

    資料倉庫只透過此介面讀寫整份資料集。
    """

    @abstractmethod
    def fetch(self) -> dict[str, Any]:
        """
        取得完整資料集

        Raises:
            LoadError: 讀取失敗或回應非成功狀態
        """
        ...

    @abstractmethod
    def save(self, payload: dict[str, Any]) -> None:
        """
        寫入完整資料集

        Raises:
            PersistenceError: 寫入失敗
        """
        ...

    def close(self) -> None:
        """釋放連線資源"""
        return None


class HttpDatasetBackend(DatasetBackend):
    """透過 REST API 讀寫資料集"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def fetch(self) -> dict[str, Any]:
        try:
            response = self._client.get("/data")
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise LoadError(f"讀取資料失敗: {e}") from e
        except ValueError as e:
            raise LoadError(f"資料格式錯誤: {e}") from e

        if not isinstance(data, dict):
            raise LoadError("資料格式錯誤: 回應不是 JSON 物件")
        return data

    def save(self, payload: dict[str, Any]) -> None:
        try:
            response = self._client.post("/data", json=payload)
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"儲存失敗 ({e.response.status_code}): {_error_message(e.response)}"
            ) from e
        except httpx.HTTPError as e:
            raise PersistenceError(f"儲存失敗: {e}") from e
        except ValueError as e:
            raise PersistenceError(f"儲存回應格式錯誤: {e}") from e

        if not isinstance(result, dict) or not result.get("ok", False):
            err = result.get("err", "未知錯誤") if isinstance(result, dict) else result
            raise PersistenceError(f"儲存失敗: {err}")

    def close(self) -> None:
        self._client.close()


def _error_message(response: httpx.Response) -> str:
    """取出錯誤回應中的 err 訊息"""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("err") or body.get("message") or body)
    return str(body)
