"""
API 路由集中註冊
"""

from fastapi import APIRouter

from vault.api.backup import router as backup_router
from vault.api.data import router as data_router
from vault.api.env import router as env_router

api_router = APIRouter(prefix="/api")
api_router.include_router(data_router)
api_router.include_router(backup_router)
api_router.include_router(env_router)
