# db.py
import logging

from fastapi import HTTPException, Request
from psycopg import AsyncConnection
from psycopg.rows import dict_row
from psycopg.types.string import TextLoader
from psycopg_pool import AsyncConnectionPool

from config import Settings

logger = logging.getLogger(__name__)


async def configure_connection(conn: AsyncConnection) -> None:
    # NUMERIC 欄位以文字讀出 (例如 "4.50")，保留小數位數，不轉成 float
    conn.adapters.register_loader("numeric", TextLoader)


def create_pool(settings: Settings) -> AsyncConnectionPool:
    """
    建立連線池物件 (尚未開啟)。

    連線池由 main.py 的 lifespan 負責開啟與關閉，
    並掛在 app.state.pool 上，不使用模組層級的全域變數。

    連線使用 autocommit：單純查詢立即生效，
    需要寫入的 handler 自己用 `async with conn.transaction()` 包起來，
    離開區塊時就 commit，回應送出前資料已經寫入。
    """
    return AsyncConnectionPool(
        conninfo=settings.conninfo,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        # 查詢結果變成 dict (例如 row["id"]) 而不是 tuple
        kwargs={"row_factory": dict_row, "autocommit": True},
        configure=configure_connection,
        open=False,  # 先設定好參數，由 open_pool() 觸發
    )


async def open_pool(pool: AsyncConnectionPool) -> None:
    logger.info("Opening database connection pool")
    await pool.open()
    logger.info("Database connection pool opened")


async def close_pool(pool: AsyncConnectionPool) -> None:
    await pool.close()
    logger.info("Database connection pool closed")


async def getDB(request: Request):
    """
    FastAPI 的 Dependency (依賴項) 函式。

    用途：
    1. 從 app.state.pool 借出一條連線給這次請求。
    2. 使用 yield 讓 FastAPI 在請求結束後自動歸還連線。
    """
    pool: AsyncConnectionPool | None = getattr(request.app.state, "pool", None)
    if pool is None:
        raise HTTPException(status_code=500, detail="Database connection pool is not available")

    # async with 會自動處理連線的借出與歸還
    async with pool.connection() as conn:
        yield conn
