"""
資產資料模型

前端傳輸格式使用 camelCase（originId、purchasePrice…），
Python 端以 snake_case 存取；未知欄位原樣保留。
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from vault.core.formatting import normalize_amount

DEFAULT_ASSET_CATEGORY = "默認"


def normalize_tags(value: Any) -> list[str]:
    """標籤轉為去重、去空白的有序清單；單一字串視為一個標籤"""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    tags: list[str] = []
    for tag in value:
        if tag is None:
            continue
        tag = str(tag).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class Asset(BaseModel):
    """單一資產"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        validate_assignment=True,
    )

    origin_id: str = ""
    name: str = ""
    category: str = DEFAULT_ASSET_CATEGORY
    subcategory: list[str] = Field(default_factory=list)
    amount: str = ""
    purchase_price: str = ""
    date: str = ""
    purchase_date: str = ""
    channel: str = ""
    purchase_address: str = ""
    image: str = ""
    note: str = ""
    description: str = ""
    pinned: bool = False
    pinned_time: int = 0
    is_composite: bool = False
    components: list[str] = Field(default_factory=list)

    @field_validator(
        "origin_id", "name", "date", "purchase_date", "channel",
        "purchase_address", "image", "note", "description",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_ASSET_CATEGORY
        return str(value)

    @field_validator("amount", "purchase_price", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> str:
        return normalize_amount(value)

    @field_validator("subcategory", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        return normalize_tags(value)

    @field_validator("components", mode="before")
    @classmethod
    def _coerce_components(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [str(comp_id) for comp_id in value if comp_id]

    @field_validator("pinned", "is_composite", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("pinned_time", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int:
        try:
            return int(value or 0)
        except (TypeError, ValueError):
            return 0

    def to_wire(self) -> dict[str, Any]:
        """轉為前端 / API 使用的 camelCase dict（含未知欄位）"""
        return self.model_dump(by_alias=True, mode="json")

    def __repr__(self) -> str:
        return f"<Asset {self.origin_id} {self.name!r}>"


class StoreState(BaseModel):
    """資料倉庫完整狀態，即整份資料集"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    categories: list[str] = Field(default_factory=list)
    channels: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    assets: list[Asset] = Field(default_factory=list)
    hidden_columns: list[str] = Field(default_factory=list)
    column_order: list[str] = Field(default_factory=list)
    columns: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator(
        "categories", "channels", "tags", "hidden_columns", "column_order",
        mode="before",
    )
    @classmethod
    def _coerce_names(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if item is not None]

    @field_validator("assets", mode="before")
    @classmethod
    def _coerce_assets(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, (dict, Asset))]

    @field_validator("columns", mode="before")
    @classmethod
    def _coerce_columns(cls, value: Any) -> list[dict[str, Any]]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    def to_payload(self) -> dict[str, Any]:
        """序列化為 POST /api/data 的請求內容"""
        return self.model_dump(by_alias=True, mode="json")
