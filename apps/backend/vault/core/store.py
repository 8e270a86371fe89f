"""
資產資料倉庫

所有資產資料的唯一來源（Single Source of Truth）：
- 載入並正規化整份資料集
- 新增、更新、刪除、置頂資產
- 組合資產的連動重算
- 通知訂閱者並以防抖方式寫回持久層

資料倉庫於應用程式啟動時建立一次，再注入給需要的元件。
"""

import enum
import logging
import threading
import time
from typing import Any, Callable

from pydantic import ValidationError

from vault.config import Settings, get_settings
from vault.core.backend import DatasetBackend, HttpDatasetBackend
from vault.core.composite import recompute_composite
from vault.core.debounce import Debouncer
from vault.core.filters import FilterCriteria, filter_assets, sort_for_display
from vault.core.formatting import generate_id
from vault.core.models import Asset, StoreState
from vault.errors import (
    AssetValidationError,
    LoadError,
    PersistenceError,
    StoreNotReadyError,
)

logger = logging.getLogger(__name__)

Listener = Callable[[StoreState], None]


class StoreStatus(str, enum.Enum):
    """資料倉庫生命週期"""
    UNINITIALIZED = "uninitialized"
    READY = "ready"


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class AssetStore:
    """
    資產資料倉庫

    使用方式：
        store = AssetStore(HttpDatasetBackend("http://localhost:3000/api"))
        store.load()
        store.upsert({"name": "筆電", "amount": "100"}, is_new=True)
    """

    def __init__(
        self,
        backend: DatasetBackend,
        save_debounce: float = 0.8,
        on_persist_error: Callable[[PersistenceError], None] | None = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self._backend = backend
        self._state = StoreState()
        self._status = StoreStatus.UNINITIALIZED
        self._subscribers: list[Listener] = []
        self._lock = threading.RLock()
        self._saver = Debouncer(self._save_now, save_debounce)
        self._on_persist_error = on_persist_error
        self._clock = clock
        self.last_persist_error: PersistenceError | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> "AssetStore":
        """依設定建立連線到 REST API 的資料倉庫"""
        settings = settings or get_settings()
        backend = HttpDatasetBackend(settings.api_base_url, timeout=settings.api_timeout)
        return cls(backend, save_debounce=settings.save_debounce_seconds, **kwargs)

    @property
    def status(self) -> StoreStatus:
        return self._status

    # === 載入 ===

    def load(self) -> StoreState:
        """
        從持久層載入整份資料集

        每筆資產補齊缺少的欄位（保留未知欄位），缺少 ID 者產生新 ID。
        失敗時拋出 LoadError，資料倉庫維持未初始化，可重新呼叫。
        """
        data = self._backend.fetch()

        raw_assets = data.get("assets")
        if not isinstance(raw_assets, list):
            raw_assets = []
        existing_ids = {
            str(raw["originId"])
            for raw in raw_assets
            if isinstance(raw, dict) and raw.get("originId")
        }

        try:
            assets = []
            for raw in raw_assets:
                if not isinstance(raw, dict):
                    continue
                asset = Asset.model_validate(raw)
                if not asset.origin_id:
                    asset.origin_id = generate_id(existing_ids)
                assets.append(asset)
            state = StoreState.model_validate({**data, "assets": assets})
        except ValidationError as e:
            raise LoadError(f"資料格式錯誤: {e}") from e

        with self._lock:
            self._state = state
            self._status = StoreStatus.READY
        logger.info("資料倉庫已載入 %d 筆資產", len(state.assets))
        return self.snapshot()

    # === 查詢 ===

    def snapshot(self) -> StoreState:
        """回傳完整狀態的深拷貝"""
        with self._lock:
            return self._state.model_copy(deep=True)

    def list_assets(self) -> list[Asset]:
        """回傳所有資產的副本，避免外部直接修改內部狀態"""
        with self._lock:
            return [a.model_copy(deep=True) for a in self._state.assets]

    def get_by_id(self, origin_id: str) -> Asset | None:
        with self._lock:
            idx = self._find_index(origin_id)
            if idx is None:
                return None
            return self._state.assets[idx].model_copy(deep=True)

    def query(
        self,
        search_keyword: str = "",
        criteria: FilterCriteria | None = None,
        show_component_assets: bool = True,
    ) -> list[Asset]:
        """篩選後依置頂順序排列的資產副本"""
        matched = filter_assets(
            self.list_assets(),
            search_keyword=search_keyword,
            criteria=criteria,
            show_component_assets=show_component_assets,
        )
        return sort_for_display(matched)

    # === 修改 ===

    def upsert(self, asset_data: Asset | dict[str, Any], is_new: bool = False) -> Asset:
        """
        新增或更新資產

        流程：
        1. 正規化輸入並驗證名稱
        2. 組合資產先以目前的資產清單重算自身金額與標籤
        3. 新增至清單尾端，或原地取代同 ID 的資產
        4. 更新時連動重算所有引用此資產的組合資產
        5. 寫回持久層並通知訂閱者
        """
        self._require_ready()
        asset = self._normalize(asset_data)
        if not asset.name.strip():
            raise AssetValidationError("資產名稱不可為空")

        with self._lock:
            assets = self._state.assets
            if is_new:
                ids = {a.origin_id for a in assets}
                if not asset.origin_id:
                    asset.origin_id = generate_id(ids)
                elif asset.origin_id in ids:
                    raise AssetValidationError(f"資產 ID 已存在: {asset.origin_id}")
                idx = None
            else:
                idx = self._find_index(asset.origin_id)
                if idx is None:
                    logger.error("找不到要更新的資產: %s", asset.origin_id)
                    raise AssetValidationError(f"資產不存在: {asset.origin_id}")

            if asset.is_composite:
                asset = recompute_composite(asset, assets)

            if idx is None:
                assets.append(asset)
            else:
                assets[idx] = asset
                self._update_parent_composites(asset.origin_id)

            result = asset.model_copy(deep=True)

        self._commit()
        return result

    def delete(self, origin_id: str) -> bool:
        """刪除資產，並從所有組合資產中移除此 ID 後重算；找不到時不做任何事"""
        self._require_ready()
        with self._lock:
            idx = self._find_index(origin_id)
            if idx is None:
                return False

            assets = self._state.assets
            removed = assets.pop(idx)
            for i, parent in enumerate(assets):
                if not (parent.is_composite and origin_id in parent.components):
                    continue
                parent = parent.model_copy(deep=True)
                parent.components = [c for c in parent.components if c != origin_id]
                parent = recompute_composite(parent, assets)
                if not parent.components:
                    parent.amount = ""
                    parent.purchase_price = ""
                assets[i] = parent
                logger.debug("組合資產 %s 已移除子資產 %s", parent.name, origin_id)

        logger.info("已刪除資產 %s (%s)", removed.name, origin_id)
        self._commit()
        return True

    def toggle_pin(self, origin_id: str) -> Asset | None:
        """切換置頂；置頂時記錄單調遞增的置頂時間，取消時歸零"""
        self._require_ready()
        with self._lock:
            idx = self._find_index(origin_id)
            if idx is None:
                return None
            asset = self._state.assets[idx]
            asset.pinned = not asset.pinned
            asset.pinned_time = self._next_pin_time() if asset.pinned else 0
            result = asset.model_copy(deep=True)

        self._commit()
        return result

    def update_settings(
        self,
        *,
        categories: list[str] | None = None,
        channels: list[str] | None = None,
        tags: list[str] | None = None,
        hidden_columns: list[str] | None = None,
        column_order: list[str] | None = None,
        columns: list[dict[str, Any]] | None = None,
    ) -> None:
        """更新分類、渠道、標籤與欄位設定（管理頁使用）"""
        self._require_ready()
        changes = {
            "categories": categories,
            "channels": channels,
            "tags": tags,
            "hidden_columns": hidden_columns,
            "column_order": column_order,
            "columns": columns,
        }
        with self._lock:
            for field, value in changes.items():
                if value is not None:
                    setattr(self._state, field, list(value))
        self._commit()

    # === 訂閱 ===

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """註冊狀態變更通知，回傳取消訂閱的函式"""
        self._subscribers.append(listener)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    # === 持久化 ===

    def flush(self) -> None:
        """立即送出尚在防抖等待中的儲存"""
        self._saver.flush()

    def close(self) -> None:
        """送出待寫入的資料、等待進行中的儲存結束後關閉持久層連線"""
        self.flush()
        self._saver.cancel()
        self._saver.wait()
        self._backend.close()

    def _persist(self) -> None:
        self._saver.trigger()

    def _save_now(self) -> None:
        """
        將整份資料集寫回持久層

        失敗時不回滾記憶體中的狀態，也不自動重試，只記錄並回報。
        """
        with self._lock:
            payload = self._state.to_payload()
        try:
            self._backend.save(payload)
        except PersistenceError as e:
            logger.error("資料儲存失敗: %s", e)
            self.last_persist_error = e
            if self._on_persist_error is not None:
                self._on_persist_error(e)
            return
        self.last_persist_error = None
        logger.info("資料已儲存 (%d 筆資產)", len(payload["assets"]))

    # === 內部輔助 ===

    def _commit(self) -> None:
        self._persist()
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._subscribers):
            listener(self.snapshot())

    def _require_ready(self) -> None:
        if self._status is not StoreStatus.READY:
            raise StoreNotReadyError("資料倉庫尚未載入")

    def _find_index(self, origin_id: str) -> int | None:
        for idx, asset in enumerate(self._state.assets):
            if asset.origin_id == origin_id:
                return idx
        return None

    def _normalize(self, asset_data: Asset | dict[str, Any]) -> Asset:
        if isinstance(asset_data, Asset):
            asset_data = asset_data.model_dump(by_alias=True)
        try:
            return Asset.model_validate(asset_data)
        except ValidationError as e:
            raise AssetValidationError(f"資產資料格式錯誤: {e}") from e

    def _update_parent_composites(self, child_id: str) -> None:
        """找出所有引用 child_id 的組合資產並重算"""
        assets = self._state.assets
        for i, parent in enumerate(assets):
            if parent.is_composite and child_id in parent.components:
                assets[i] = recompute_composite(parent, assets)
                logger.debug("已連動更新組合資產: %s", parent.name)

    def _next_pin_time(self) -> int:
        latest = max((a.pinned_time for a in self._state.assets), default=0)
        return max(self._clock(), latest + 1)
