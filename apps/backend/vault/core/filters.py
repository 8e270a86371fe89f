"""
搜尋與篩選模組

依關鍵字與多條件篩選資產，並提供置頂排序。
"""

from typing import Any, Callable, Iterable

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from vault.core.composite import is_component_of as _is_component_of
from vault.core.formatting import parse_amount
from vault.core.models import Asset


class FilterCriteria(BaseModel):
    """結構化篩選條件，未設定的條件一律視為通過"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    category: str | None = None
    channel: str | None = None
    tag: str | None = None
    date_from: str | None = None
    date_to: str | None = None
    amount_min: float | None = None
    amount_max: float | None = None

    @field_validator("amount_min", "amount_max", mode="before")
    @classmethod
    def _parse_bound(cls, value: Any) -> float | None:
        if value is None or value == "":
            return None
        if isinstance(value, (int, float)):
            return float(value)
        return parse_amount(value)


def _matches_keyword(asset: Asset, keyword: str) -> bool:
    """名稱、備註、標籤、分類、渠道任一欄位包含關鍵字（不分大小寫）"""
    keyword = keyword.lower()
    fields: list[str | list[str]] = [
        asset.name,
        asset.note,
        asset.subcategory,
        asset.category,
        asset.channel,
    ]
    for field in fields:
        if isinstance(field, list):
            if any(keyword in tag.lower() for tag in field):
                return True
        elif keyword in field.lower():
            return True
    return False


def passes_filter(
    asset: Asset,
    *,
    search_keyword: str = "",
    criteria: FilterCriteria | None = None,
    show_component_assets: bool = True,
    is_component_of: Callable[[Asset], bool] | None = None,
) -> bool:
    """
    判斷資產是否通過搜尋與篩選

    依序檢查，任一條件不符即回傳 False：
    1. 關閉「顯示子資產」時排除被組合資產引用的資產
    2. 關鍵字（名稱、備註、標籤、分類、渠道）
    3. 分類、渠道精確比對
    4. 標籤包含
    5. 日期範圍（含邊界，資產無日期時略過）
    6. 金額範圍（取金額的數字部分）
    """
    criteria = criteria or FilterCriteria()

    if not show_component_assets and is_component_of is not None and is_component_of(asset):
        return False

    if search_keyword and not _matches_keyword(asset, search_keyword):
        return False

    if criteria.category and asset.category != criteria.category:
        return False
    if criteria.channel and asset.channel != criteria.channel:
        return False

    if criteria.tag and criteria.tag not in asset.subcategory:
        return False

    if asset.date:
        if criteria.date_from and asset.date < criteria.date_from:
            return False
        if criteria.date_to and asset.date > criteria.date_to:
            return False

    if criteria.amount_min is not None or criteria.amount_max is not None:
        amount = parse_amount(asset.amount)
        if criteria.amount_min is not None and amount < criteria.amount_min:
            return False
        if criteria.amount_max is not None and amount > criteria.amount_max:
            return False

    return True


def filter_assets(
    assets: Iterable[Asset],
    *,
    search_keyword: str = "",
    criteria: FilterCriteria | None = None,
    show_component_assets: bool = True,
) -> list[Asset]:
    """以同一批資產判斷子資產身分並篩選"""
    assets = list(assets)
    return [
        asset
        for asset in assets
        if passes_filter(
            asset,
            search_keyword=search_keyword,
            criteria=criteria,
            show_component_assets=show_component_assets,
            is_component_of=lambda a: _is_component_of(a, assets),
        )
    ]


def sort_for_display(assets: Iterable[Asset]) -> list[Asset]:
    """置頂資產排最前（依置頂時間新到舊），其餘維持原順序"""
    assets = list(assets)
    pinned = sorted((a for a in assets if a.pinned), key=lambda a: a.pinned_time, reverse=True)
    others = [a for a in assets if not a.pinned]
    return pinned + others
