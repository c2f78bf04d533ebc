import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from psycopg_pool import PoolTimeout

from config import get_settings
from db import close_pool, create_pool, open_pool
from errors import register_error_handlers
from init_db import init_database
from log_config import configure_logging
from utils import setup_upload_directories

configure_logging()
logger = logging.getLogger(__name__)
settings = get_settings()


# --- 1. 連線池與資料庫初始化 ---
# 伺服器啟動時開啟連線池並自動檢查/建立資料表，關閉時釋放連線池
@asynccontextmanager
async def lifespan(app: FastAPI):
    pool = create_pool(settings)
    await open_pool(pool)
    app.state.pool = pool
    try:
        async with pool.connection() as conn:
            await init_database(conn)
    except PoolTimeout:
        logger.exception("Database unreachable at startup")
    try:
        yield
    finally:
        await close_pool(pool)


# --- 2. 建立應用程式 ---
app = FastAPI(title="GCAFO Booking API", version="1.0.0", lifespan=lifespan)
register_error_handlers(app)

# --- 3. CORS ---
cors_origins = settings.cors_origins
allow_any_origin = cors_origins == ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    # 瀏覽器不接受 wildcard + credentials 的組合
    allow_credentials=not allow_any_origin,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- 4. 掛載上傳檔案目錄 ---
# 例如：<img src="/uploads/avatars/..."> 會對應到 UPLOAD_ROOT 資料夾
setup_upload_directories()
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_ROOT), name="uploads")

# --- 5. 匯入並註冊各個功能的路由 (Router) ---
from routes.auth import router as auth_router
from routes.bookings import router as bookings_router
from routes.messages import router as messages_router
from routes.prestataires import router as prestataires_router
from routes.reviews import router as reviews_router
from routes.services import router as services_router
from routes.users import router as users_router

app.include_router(auth_router)
app.include_router(prestataires_router)
app.include_router(services_router)
app.include_router(bookings_router)
app.include_router(reviews_router)
app.include_router(messages_router)
app.include_router(users_router)


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
