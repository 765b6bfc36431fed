"""
数据模式层 (Schemas)

使用 Pydantic 定义 API 的请求和响应模型：
- 自动数据验证
- 自动生成 OpenAPI 文档
- 响应模型中不包含任何密码字段
"""

from app.schemas.country import CountryInfo
from app.schemas.user import (
    AuthorizationView,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    UserCreate,
    UserUpdate,
)

__all__ = [
    "AuthorizationView",
    "ChangePasswordRequest",
    "CountryInfo",
    "LoginRequest",
    "MessageResponse",
    "UserCreate",
    "UserUpdate",
]
