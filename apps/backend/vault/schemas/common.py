"""
共用 Schema 定義

持久層 API 的回應格式：成功 {ok: true, ...}，失敗 {ok: false, err}。
"""

from pydantic import BaseModel, Field


class OkResponse(BaseModel):
    """統一成功回應"""
    ok: bool = True


class ErrorResponse(BaseModel):
    """錯誤回應格式"""
    ok: bool = False
    err: str
    detail: str | None = None


class FixResult(OkResponse):
    """圖片引用校正結果"""
    cleaned: int = 0
    deleted: int = 0


class BackupResult(OkResponse):
    """手動備份結果"""
    file: str


class BackupConfig(BaseModel):
    """自動備份間隔（天，0 表示停用）"""
    days: int


class BackupConfigUpdate(BaseModel):
    """更新自動備份間隔，days 為必填的非負整數"""
    days: int = Field(..., ge=0)


class EnvResponse(BaseModel):
    """前端預設行為設定"""
    defaultDark: bool
    defaultAutoSave: bool
    debug: bool
    fontUrl: str
