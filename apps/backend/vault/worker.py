"""
背景自動備份排程 (Background Backup Worker)

使用 APScheduler 定期檢查自動備份是否到期，
補足長時間沒有儲存請求時的備份。
"""

import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from vault.api.deps import get_backup_manager
from vault.config import get_settings

logger = logging.getLogger(__name__)

# 使用 AsyncIOScheduler
scheduler = AsyncIOScheduler()


async def run_auto_backup():
    """背景排程任務：到期時備份資料檔"""
    try:
        manager = get_backup_manager()
        file_name = await asyncio.to_thread(manager.maybe_auto_backup)
        if file_name:
            logger.info("背景自動備份完成: %s", file_name)
    except Exception as e:
        logger.error("背景自動備份失敗: %s", e)


def setup_worker():
    """設定並啟動排程器"""
    settings = get_settings()
    scheduler.add_job(
        run_auto_backup,
        'interval',
        minutes=settings.backup_check_minutes,
        id='auto_backup_job',
        replace_existing=True
    )
    scheduler.start()
    logger.info("✅ 背景自動備份排程已啟動 (每 %d 分鐘檢查)", settings.backup_check_minutes)


def stop_worker():
    """停止排程器"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("背景自動備份排程已關閉")
