"""
数据库会话管理

这个模块负责：
1. 创建数据库引擎（连接池）
2. 提供异步会话工厂
3. 实现 FastAPI 依赖注入的数据库会话获取函数

事务约定：
- 每个请求一个 AsyncSession，业务操作在 service 层统一 commit
- 请求中途异常或被取消时，会话关闭会回滚所有未提交的写入
"""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.config import get_settings
from app.db.base import Base

settings = get_settings()


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    """SQLite 默认不检查外键，需要每个连接单独打开"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    """
    根据连接串创建异步引擎

    SQLite 不支持连接池参数（内存库使用 StaticPool），
    只有服务端数据库才配置连接池大小。
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        new_engine = create_async_engine(database_url, echo=False, **kwargs)
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return new_engine

    return create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,     # 取连接前先探活，避免使用已断开的连接
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=1800,      # 防止数据库端空闲超时断开
        **kwargs,
    )


# ==================== 创建数据库引擎 ====================
engine = build_engine(settings.database_url)

# ==================== 创建会话工厂 ====================
SessionLocal = async_sessionmaker(
    engine,
    expire_on_commit=False,  # 提交后对象仍可访问，不触发额外查询
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    获取数据库会话（FastAPI 依赖注入函数）

    Yields:
        AsyncSession: 异步数据库会话对象
    """
    async with SessionLocal() as session:
        yield session


async def init_models(bind: AsyncEngine | None = None) -> None:
    """
    根据 ORM 模型建表（仅开发/测试环境使用）

    不会修改已存在的表结构。
    """
    from app import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
