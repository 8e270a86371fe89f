"""
組合資產模組

組合資產由其他資產組成，金額與標籤皆由子資產推導：
- 子資產判斷（掃描全部組合資產，不保存反向參照）
- 金額加總、標籤合併
- 子資產明細（懸停提示用）

所有函式皆為純函式，不修改傳入的資產；
找不到的子資產 ID 一律略過或顯示為「未知」，絕不拋出例外。
只解析一層組合，組合資產中的組合資產以其自身金額計算。
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Literal

from vault.core.formatting import normalize_amount, parse_amount
from vault.core.models import Asset

logger = logging.getLogger(__name__)

UNKNOWN_COMPONENT = "未知"


@dataclass
class ComponentDetail:
    """子資產明細"""
    name: str
    value: str


def _index(all_assets: Iterable[Asset]) -> dict[str, Asset]:
    return {a.origin_id: a for a in all_assets if a.origin_id}


def _resolved_components(composite: Asset, all_assets: Iterable[Asset]) -> list[Asset]:
    """依序取出找得到的子資產"""
    lookup = _index(all_assets)
    return [lookup[comp_id] for comp_id in composite.components if comp_id in lookup]


def is_component_of(asset: Asset, all_assets: Iterable[Asset]) -> bool:
    """判斷資產是否被任何組合資產引用"""
    if not asset.origin_id:
        return False
    return any(
        other.is_composite and asset.origin_id in other.components
        for other in all_assets
        if other.origin_id != asset.origin_id
    )


def used_component_ids(all_assets: Iterable[Asset]) -> set[str]:
    """回傳所有被組合資產引用的資產 ID"""
    used: set[str] = set()
    for asset in all_assets:
        if asset.is_composite:
            used.update(asset.components)
    return used


def aggregate_amount(composite: Asset, all_assets: Iterable[Asset]) -> str:
    """
    計算組合資產總金額

    子資產金額只取數字部分（"12.5/年" 視為 12.5）後加總，
    四捨五入到分後為 0、總和溢位或沒有任何子資產存在時回傳空字串。

    例：子資產 100.5 與 200.3 → "300.80"
    """
    if not composite.is_composite or not composite.components:
        return composite.amount

    components = _resolved_components(composite, all_assets)
    total = sum(parse_amount(comp.amount) for comp in components if comp.amount)
    if not components or not math.isfinite(total) or round(total, 2) == 0:
        return ""
    return normalize_amount(total)


def merge_tags(composite: Asset, all_assets: Iterable[Asset]) -> list[str]:
    """
    合併組合資產與所有子資產的標籤（去重，保留首次出現順序）

    例：自身 ["標籤1"]，子資產 ["標籤1", "標籤2"]、["標籤2", "標籤3"]
        → ["標籤1", "標籤2", "標籤3"]
    """
    merged: list[str] = []

    def _add(tags: Iterable[str]) -> None:
        for tag in tags:
            tag = tag.strip()
            if tag and tag not in merged:
                merged.append(tag)

    _add(composite.subcategory)
    if composite.is_composite:
        for comp in _resolved_components(composite, all_assets):
            _add(comp.subcategory)
    return merged


def component_details(
    composite: Asset,
    field: Literal["date", "channel"],
    all_assets: Iterable[Asset],
) -> list[ComponentDetail]:
    """
    取得子資產明細（用於懸停提示）

    Args:
        composite: 組合資產
        field: "date" 取購買日期（無則取日期），"channel" 取購買渠道
        all_assets: 全部資產

    Returns:
        名稱與欄位值皆非空的子資產明細
    """
    if not composite.is_composite:
        return []

    details: list[ComponentDetail] = []
    for comp in _resolved_components(composite, all_assets):
        if field == "date":
            value = comp.purchase_date or comp.date
        elif field == "channel":
            value = comp.channel
        else:
            value = ""
        if comp.name and value:
            details.append(ComponentDetail(name=comp.name, value=value))
    return details


def component_names(composite: Asset, all_assets: Iterable[Asset]) -> list[str]:
    """依序列出子資產名稱，找不到的 ID 顯示為「未知」"""
    lookup = _index(all_assets)
    names = []
    for comp_id in composite.components:
        comp = lookup.get(comp_id)
        names.append(comp.name if comp and comp.name else UNKNOWN_COMPONENT)
    return names


def recompute_composite(composite: Asset, all_assets: Iterable[Asset]) -> Asset:
    """重新推導組合資產的金額、購買價格與標籤，回傳新的資產物件"""
    all_assets = list(all_assets)
    updated = composite.model_copy(deep=True)
    if composite.is_composite and composite.components:
        amount = aggregate_amount(composite, all_assets)
        updated.amount = amount
        updated.purchase_price = amount  # 購買價格與金額同步
    updated.subcategory = merge_tags(composite, all_assets)
    logger.debug(
        "組合資產 %s 重算完成: amount=%s tags=%s",
        composite.origin_id, updated.amount, updated.subcategory,
    )
    return updated
