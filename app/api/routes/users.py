"""
用户 API 路由

提供用户目录的增删改查、登录和修改密码接口。
业务错误由 service 层以 UserDirectoryError 子类抛出，在 main.py 统一映射为
{"detail": "...", "code": "..."} 响应。
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session
from app.auth.password import hash_password
from app.schemas.user import (
    AuthorizationView,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    UserCreate,
    UserUpdate,
)
from app.services import login as login_service
from app.services import users as user_service
from app.services.authorization import build_authorization_view

router = APIRouter(prefix="/user", tags=["users"])


def _err(code: str, detail: str) -> dict:
    """统一错误响应结构"""
    return {"code": code, "detail": detail}


async def _get_view_or_404(db: AsyncSession, user_id: int) -> AuthorizationView:
    view = await build_authorization_view(db, user_id)
    if view is None:
        raise HTTPException(status_code=404, detail=_err("USER_NOT_FOUND", "User not found"))
    return view


# ==================== 用户目录 ====================

@router.get("", response_model=list[AuthorizationView])
async def list_users(db: AsyncSession = Depends(get_db_session)) -> list[AuthorizationView]:
    """列出所有用户（含角色名称和权限列表）"""
    return await user_service.list_users(db)


@router.get("/userWithRole/{user_id}", response_model=AuthorizationView)
async def get_user_with_role(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> AuthorizationView:
    """获取用户授权视图"""
    return await _get_view_or_404(db, user_id)


@router.get("/{user_id}", response_model=AuthorizationView)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> AuthorizationView:
    """获取用户详情"""
    return await _get_view_or_404(db, user_id)


@router.post("", response_model=AuthorizationView, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> AuthorizationView:
    """
    创建用户

    邮箱已注册时返回 400，响应中不包含密码。
    """
    return await user_service.create_user(db, data, hash_password(data.password))


@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_user(
    user_id: int,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> None:
    """部分更新用户，未提供的字段保持不变"""
    await user_service.update_user(db, user_id, data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> None:
    """删除用户"""
    await user_service.delete_user(db, user_id)


# ==================== 登录 ====================

@router.post("/login", response_model=AuthorizationView)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthorizationView:
    """
    邮箱 + 密码登录

    邮箱不存在与密码错误返回相同的 401 响应。
    """
    return await login_service.login(db, data.email, data.password)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    data: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """修改密码，需要提供当前密码"""
    await login_service.change_password(
        db,
        data.user_id,
        data.current_password,
        data.new_password,
    )
    return MessageResponse(message="Password updated successfully")
