"""用户相关的请求/响应模型"""

from datetime import datetime

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """创建用户请求（密码为明文，入库前由 service 层哈希）"""
    full_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255, description="登录邮箱，区分大小写")
    password: str = Field(..., min_length=1, max_length=128)
    country: str = Field(..., min_length=1, max_length=100)
    role_id: int = Field(..., ge=1, description="角色 ID，需为已存在的角色")


class UserUpdate(BaseModel):
    """
    部分更新请求

    未出现的字段保持不变；显式传 null 也视为不修改。
    password 为空字符串时不修改密码。
    """
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    password: str | None = Field(default=None, max_length=128)
    country: str | None = Field(default=None, min_length=1, max_length=100)
    role_id: int | None = Field(default=None, ge=1)

    def changes(self) -> dict:
        """返回请求中显式给出且非 null 的字段"""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


class AuthorizationView(BaseModel):
    """
    用户授权视图

    用户资料 + 角色名称 + 经由角色获得的权限列表（去重、按名称排序）。
    每次请求实时计算，不持久化，不包含密码哈希。
    """
    id: int
    full_name: str
    email: str
    country: str
    last_login_at: datetime | None = None
    role_name: str | None = None
    permissions: list[str] = Field(default_factory=list)


class LoginRequest(BaseModel):
    """登录请求"""
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class ChangePasswordRequest(BaseModel):
    """修改密码请求"""
    user_id: int = Field(..., ge=1)
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=128)


class MessageResponse(BaseModel):
    """简单消息响应"""
    message: str
