"""
資料集 API 路由

讀取、儲存、重置整份資料集，以及校正圖片引用。
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from vault.api.deps import get_backup_manager, get_repository
from vault.errors import InvalidPayloadError, StorageError
from vault.schemas.common import FixResult, OkResponse
from vault.storage.backup import BackupManager
from vault.storage.repository import DataRepository

logger = logging.getLogger(__name__)
router = APIRouter(tags=["資料集"])


@router.get("/data")
def get_data(repo: DataRepository = Depends(get_repository)) -> dict[str, Any]:
    """取得完整資料集（不存在時自動建立預設資料）"""
    try:
        return repo.read()
    except StorageError as e:
        logger.error("讀取資料檔案失敗: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/data", response_model=OkResponse)
def save_data(
    payload: dict[str, Any] = Body(...),
    repo: DataRepository = Depends(get_repository),
    backups: BackupManager = Depends(get_backup_manager),
):
    """
    儲存完整資料集

    寫入圖片、原子取代資料檔、刪除不再引用的圖片，
    成功後檢查是否需要自動備份。
    """
    try:
        repo.save(payload)
    except InvalidPayloadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        logger.error("儲存資料失敗: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    # 資料已寫入，自動備份失敗不影響本次儲存結果
    try:
        backups.maybe_auto_backup()
    except StorageError as e:
        logger.error("自動備份失敗: %s", e)

    return OkResponse()


@router.post("/reset", response_model=OkResponse)
def reset_data(repo: DataRepository = Depends(get_repository)):
    """以預設資料集取代目前資料"""
    try:
        repo.reset()
    except StorageError as e:
        logger.error("重置資料失敗: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return OkResponse()


@router.post("/fix", response_model=FixResult)
def fix_images(repo: DataRepository = Depends(get_repository)):
    """校正圖片引用：清空失效引用並刪除未使用的圖片檔"""
    try:
        cleaned, deleted = repo.fix()
    except StorageError as e:
        logger.error("修復資料失敗: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return FixResult(cleaned=cleaned, deleted=deleted)
