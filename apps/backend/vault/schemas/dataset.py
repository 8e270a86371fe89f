"""
資料集 Schema

整份資料集以單一 JSON 檔保存，結構如下：
categories / channels / tags / assets / hiddenColumns / columnOrder / columns
未知的頂層欄位原樣保留。
"""

import copy
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# 預設分類與渠道
DEFAULT_CATEGORIES = ["設備", "軟體", "零件", "其他"]
DEFAULT_CHANNELS = ["淘寶", "京東", "拼多多", "閒魚", "其他"]

DEFAULT_DATASET: dict[str, Any] = {
    "categories": DEFAULT_CATEGORIES,
    "channels": DEFAULT_CHANNELS,
    "tags": [],
    "assets": [],
}


def default_dataset() -> dict[str, Any]:
    """回傳預設資料集的副本"""
    return copy.deepcopy(DEFAULT_DATASET)


class DatasetPayload(BaseModel):
    """POST /api/data 請求內容；缺少或型別錯誤的清單欄位補上安全預設值"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    categories: list[Any] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    channels: list[Any] = Field(default_factory=lambda: list(DEFAULT_CHANNELS))
    tags: list[Any] = Field(default_factory=list)
    assets: list[dict[str, Any]] = Field(default_factory=list)
    hidden_columns: list[Any] = Field(default_factory=list)
    column_order: list[Any] = Field(default_factory=list)
    columns: list[Any] = Field(default_factory=list)

    @field_validator("categories", mode="before")
    @classmethod
    def _default_categories(cls, value: Any) -> list[Any]:
        return value if isinstance(value, list) else list(DEFAULT_CATEGORIES)

    @field_validator("channels", mode="before")
    @classmethod
    def _default_channels(cls, value: Any) -> list[Any]:
        return value if isinstance(value, list) else list(DEFAULT_CHANNELS)

    @field_validator("tags", "hidden_columns", "column_order", "columns", mode="before")
    @classmethod
    def _default_list(cls, value: Any) -> list[Any]:
        return value if isinstance(value, list) else []

    @field_validator("assets", mode="before")
    @classmethod
    def _only_objects(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    def to_document(self) -> dict[str, Any]:
        """轉為寫入 data.json 的內容"""
        return self.model_dump(by_alias=True, mode="json")
