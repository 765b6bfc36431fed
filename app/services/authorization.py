"""
授权视图投影服务

把 用户 → 角色 → 角色权限关联 → 权限 的多对多关系展开为扁平的 AuthorizationView。

实现要点：
- 不依赖 ORM 懒加载导航，全部使用显式 JOIN 查询，查询次数固定
- 单用户：1 次查询用户+角色名，1 次查询该角色的权限
- 列表：1 次查询所有用户+角色名，1 次批量查询涉及角色的权限，内存中拼接
- 权限按 permission id 去重后按名称排序，同样的数据多次调用结果一致
- 纯读操作，没有副作用

使用示例：
    view = await build_authorization_view(session, user_id=1)
    if view is None:
        ...  # 用户不存在
"""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Permission, Role, RolePermission, User
from app.schemas.user import AuthorizationView


def _to_view(user: User, role_name: str | None, permissions: list[str]) -> AuthorizationView:
    return AuthorizationView(
        id=user.id,
        full_name=user.full_name,
        email=user.email,
        country=user.country,
        last_login_at=user.last_login_at,
        role_name=role_name,
        permissions=permissions,
    )


async def load_role_permissions(
    session: AsyncSession,
    role_ids: Iterable[int],
) -> dict[int, list[str]]:
    """
    批量加载角色的权限名称

    Args:
        session: 数据库会话
        role_ids: 角色 ID 列表（可重复）

    Returns:
        dict: role_id -> 去重排序后的权限名称列表，没有任何授权的角色映射为空列表
    """
    ids = {role_id for role_id in role_ids if role_id is not None}
    if not ids:
        return {}

    result = await session.execute(
        select(RolePermission.role_id, Permission.id, Permission.name)
        .join(Permission, Permission.id == RolePermission.permission_id)
        .where(RolePermission.role_id.in_(ids))
    )

    # role_id -> {permission_id: name}，按 permission id 去重
    grants: dict[int, dict[int, str]] = {role_id: {} for role_id in ids}
    for role_id, permission_id, name in result.all():
        grants[role_id][permission_id] = name

    return {role_id: sorted(names.values()) for role_id, names in grants.items()}


async def build_authorization_view(
    session: AsyncSession,
    user_id: int,
) -> AuthorizationView | None:
    """
    构建单个用户的授权视图

    Returns:
        AuthorizationView | None: 用户不存在返回 None；
        用户存在但角色无法解析时 role_name 为 None、permissions 为空
    """
    result = await session.execute(
        select(User, Role.name)
        .outerjoin(Role, Role.id == User.role_id)
        .where(User.id == user_id)
    )
    row = result.one_or_none()
    if row is None:
        return None

    user, role_name = row
    if role_name is None:
        return _to_view(user, None, [])

    grants = await load_role_permissions(session, [user.role_id])
    return _to_view(user, role_name, grants.get(user.role_id, []))


async def build_authorization_views(session: AsyncSession) -> list[AuthorizationView]:
    """构建所有用户的授权视图，按用户 ID 排序"""
    result = await session.execute(
        select(User, Role.name)
        .outerjoin(Role, Role.id == User.role_id)
        .order_by(User.id)
    )
    rows = result.all()

    grants = await load_role_permissions(
        session,
        (user.role_id for user, role_name in rows if role_name is not None),
    )

    views = []
    for user, role_name in rows:
        permissions = grants.get(user.role_id, []) if role_name is not None else []
        views.append(_to_view(user, role_name, permissions))
    return views
