"""
数据库模块

- base.py    : SQLAlchemy 声明式基类，所有 ORM 模型都继承自它
- session.py : 引擎、会话工厂以及 FastAPI 依赖注入用的 get_db

使用 SQLAlchemy 2.0 异步 API（PostgreSQL 走 asyncpg，本地/测试走 aiosqlite）。

典型使用方式：
    from app.db.session import get_db

    async def my_endpoint(db: AsyncSession = Depends(get_db)):
        result = await db.execute(select(User))
        users = result.scalars().all()
"""
