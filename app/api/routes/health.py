"""
健康检查接口

用于容器编排系统的存活探测，附带一次数据库连通性检查。
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session

router = APIRouter()


@router.get("/healthz")
async def healthcheck(db: AsyncSession = Depends(get_db_session)) -> dict:
    """返回 {"status": "ok"} 表示服务和数据库都可用"""
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}
