"""
前端環境設定 API

提供前端預設的暗色模式、自動儲存、除錯輸出與字型設定。
"""

from fastapi import APIRouter

from vault.config import get_settings
from vault.schemas.common import EnvResponse

router = APIRouter(tags=["系統"])


@router.get("/env", response_model=EnvResponse)
def get_env():
    """取得前端預設行為設定"""
    settings = get_settings()
    return EnvResponse(
        defaultDark=settings.default_dark,
        defaultAutoSave=settings.default_auto_save,
        debug=settings.default_debug,
        fontUrl=settings.font_url,
    )
