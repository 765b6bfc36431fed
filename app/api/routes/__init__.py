"""
API 路由汇总

路由模块说明：
- health.py    : 健康检查接口
- users.py     : 用户目录、登录、修改密码
- countries.py : 国家名称列表（第三方接口 + 缓存）
"""

from fastapi import APIRouter

from app.api.routes import countries, health, users

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(users.router)  # users 路由自带 tags
api_router.include_router(countries.router)
