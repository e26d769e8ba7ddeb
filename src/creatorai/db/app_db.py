# File: src/creatorai/db/app_db.py

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from psycopg.connection_async import AsyncConnection
from psycopg_pool import AsyncConnectionPool

from src.creatorai.config import APP_DATABASE_URL
from src.creatorai.db.library_service import ensure_content_items_table

# Created lazily by the lifespan, one pool per process
app_db_pool: Optional[AsyncConnectionPool] = None


@asynccontextmanager
async def app_db_lifespan(app):
    """
    Opens the application database pool for the lifetime of the FastAPI app.
    """
    global app_db_pool

    if not APP_DATABASE_URL:
        raise ValueError("APP_DATABASE_URL must be set in env.")

    print("--- Application Startup: Creating Application DB Connection Pool ---")
    app_db_pool = AsyncConnectionPool(conninfo=APP_DATABASE_URL, open=False)
    await app_db_pool.open()

    async with app_db_pool.connection() as conn:
        await ensure_content_items_table(conn)

    yield

    print("--- Application Shutdown: Closing Application DB Connection Pool ---")
    if app_db_pool:
        await app_db_pool.close()


async def get_app_db_connection() -> AsyncGenerator[AsyncConnection, None]:
    """
    FastAPI dependency: one pooled connection per request, committed and
    released when the request is done.
    """
    if not app_db_pool:
        raise RuntimeError("Application DB pool is not initialized. Check the FastAPI lifespan.")

    async with app_db_pool.connection() as conn:
        yield conn
