"""
備份 API 路由

手動備份與自動備份間隔設定。
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from vault.api.deps import get_backup_manager
from vault.errors import StorageError
from vault.schemas.common import BackupConfig, BackupConfigUpdate, BackupResult, OkResponse
from vault.storage.backup import BackupManager

logger = logging.getLogger(__name__)
router = APIRouter(tags=["備份"])


@router.post("/backup", response_model=BackupResult)
def create_backup(backups: BackupManager = Depends(get_backup_manager)):
    """立即備份目前的資料檔"""
    try:
        file_name = backups.create_backup()
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return BackupResult(file=file_name)


@router.get("/backup-config", response_model=BackupConfig)
def get_backup_config(backups: BackupManager = Depends(get_backup_manager)):
    """取得自動備份間隔"""
    return BackupConfig(days=backups.interval_days)


@router.post("/backup-config", response_model=OkResponse)
def update_backup_config(
    config: BackupConfigUpdate,
    backups: BackupManager = Depends(get_backup_manager),
):
    """更新自動備份間隔，並立即檢查是否到期"""
    try:
        backups.set_interval_days(config.days)
        backups.maybe_auto_backup()
    except StorageError as e:
        logger.error("更新備份設定失敗: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return OkResponse()
