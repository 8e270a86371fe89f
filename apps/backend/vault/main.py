"""
AssetVault FastAPI 應用程式入口

包含請求大小限制、全域錯誤處理中介軟體、
啟動事件（初始化資料目錄與背景備份排程）。

執行：uvicorn vault.main:app --port 3000
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from vault.api.deps import get_repository
from vault.api.router import api_router
from vault.config import get_settings
from vault.schemas.common import ErrorResponse
from vault.worker import setup_worker, stop_worker

settings = get_settings()

# 設定日誌
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """應用程式生命週期管理"""
    # === 啟動時 ===
    logger.info("🚀 AssetVault API 啟動中...")
    logger.info("環境: %s", settings.app_env)
    logger.info("資料目錄: %s", settings.data_dir.resolve())

    get_repository().ensure_initialized()

    # 啟動背景自動備份排程
    setup_worker()

    yield

    # === 關閉時 ===
    logger.info("AssetVault API 關閉中...")
    stop_worker()
    logger.info("👋 AssetVault API 已關閉")


# 建立 FastAPI 應用
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="個人資產庫持久層 API",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)
app.state.max_body_bytes = settings.json_limit_bytes

# === CORS 中介軟體 ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# === 全域錯誤處理 ===

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """HTTP 錯誤統一回傳 {ok: false, err}"""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(err=str(exc.detail)).model_dump(exclude_none=True),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """請求內容格式錯誤一律回傳 400"""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            err="無效的資料格式",
            detail=str(exc.errors()) if settings.is_development else None,
        ).model_dump(exclude_none=True),
    )


@app.middleware("http")
async def error_handling_middleware(request: Request, call_next):
    """
    全域錯誤處理與請求日誌中介軟體

    - 拒絕超過 JSON_LIMIT 的請求 (413)
    - 記錄每個請求的處理時間
    - 捕獲未預期的例外並回傳統一格式
    """
    start_time = time.time()

    content_length = request.headers.get("content-length")
    max_bytes = request.app.state.max_body_bytes
    if content_length and content_length.isdigit() and int(content_length) > max_bytes:
        logger.error("請求內容過大: %s bytes (上限 %d)", content_length, max_bytes)
        return JSONResponse(
            status_code=413,
            content={"ok": False, "err": "Payload too large", "max": settings.json_limit},
        )

    try:
        response = await call_next(request)

        # 記錄請求日誌
        process_time = time.time() - start_time
        logger.info(
            "%s %s - %d (%.3fs)",
            request.method,
            request.url.path,
            response.status_code,
            process_time,
        )

        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        return response

    except Exception as e:
        process_time = time.time() - start_time
        logger.error(
            "%s %s - 500 (%.3fs) Error: %s",
            request.method,
            request.url.path,
            process_time,
            str(e),
        )
        return JSONResponse(
            status_code=500,
            content={
                "ok": False,
                "err": "Internal Server Error",
                "detail": str(e) if settings.is_development else None,
            },
        )


# === 註冊路由 ===
app.include_router(api_router)

# === 已儲存的附件圖片 ===
app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


# === 健康檢查 ===

@app.get("/health", tags=["系統"])
async def health_check():
    """API 健康檢查"""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
    }
