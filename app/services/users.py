"""
用户目录服务

负责 User 记录的增删改查，并通过授权视图投影返回对外数据。

规则：
- 邮箱唯一，大小写敏感精确匹配；重复邮箱创建返回 ConflictError，目录不变
- 创建时传入的密码必须已经是哈希值（由调用方负责哈希）
- 部分更新：只修改请求中显式给出的字段；新密码先哈希再覆盖，空密码不动原哈希
- 角色 ID 只依赖外键约束校验，违反约束时返回 InvalidInputError
- 删除为物理删除，不存在的 ID 返回 NotFoundError
- 每个写操作只 commit 一次，失败整体回滚

使用示例：
    view = await create_user(session, data, hash_password(data.password))
    await update_user(session, view.id, UserUpdate(country="Peru"))
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.password import hash_password
from app.exceptions import ConflictError, InternalError, InvalidInputError, NotFoundError
from app.infra.logging import get_logger
from app.models import User
from app.schemas.user import AuthorizationView, UserCreate, UserUpdate
from app.services.authorization import build_authorization_view, build_authorization_views

logger = get_logger(__name__)


def user_not_found() -> NotFoundError:
    return NotFoundError("User not found", code="USER_NOT_FOUND")


def email_taken() -> ConflictError:
    return ConflictError("Email is already registered", code="EMAIL_ALREADY_REGISTERED")


async def commit_or_raise(session: AsyncSession, action: str) -> None:
    """
    提交当前工作单元

    - 违反约束（外键、唯一键）：回滚并抛出 InvalidInputError
    - 其他存储故障：回滚并抛出 InternalError
    """
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"{action}失败，违反数据约束: {e.orig}")
        raise InvalidInputError(
            "User data violates a directory constraint",
            code="CONSTRAINT_VIOLATION",
        ) from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"{action}失败，存储层异常: {e}")
        raise InternalError("Storage failure") from e


async def list_users(session: AsyncSession) -> list[AuthorizationView]:
    """列出所有用户（返回完整授权视图，调用方无需二次查询角色权限）"""
    return await build_authorization_views(session)


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    return await session.get(User, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession,
    data: UserCreate,
    hashed_password: str,
) -> AuthorizationView:
    """
    创建用户

    Args:
        session: 数据库会话
        data: 创建请求（其中的明文密码不会被使用）
        hashed_password: 已哈希的密码

    Returns:
        AuthorizationView: 新用户的授权视图

    Raises:
        ConflictError: 邮箱已注册
        InvalidInputError: 角色不存在等约束错误
    """
    if await get_user_by_email(session, data.email) is not None:
        raise email_taken()

    user = User(
        full_name=data.full_name,
        email=data.email,
        hashed_password=hashed_password,
        country=data.country,
        role_id=data.role_id,
        last_login_at=None,
    )
    session.add(user)
    await commit_or_raise(session, "创建用户")

    user_id = user.id
    logger.info(f"用户已创建: id={user_id}, role_id={data.role_id}")

    view = await build_authorization_view(session, user_id)
    if view is None:
        # 提交成功后立刻读不到，只可能是并发删除
        raise user_not_found()
    return view


async def update_user(session: AsyncSession, user_id: int, data: UserUpdate) -> None:
    """
    部分更新用户

    Raises:
        NotFoundError: 用户不存在
        ConflictError: 新邮箱已被其他用户占用
        InvalidInputError: 角色不存在等约束错误
    """
    user = await get_user(session, user_id)
    if user is None:
        raise user_not_found()

    changes = data.changes()
    password = changes.pop("password", None)

    new_email = changes.get("email")
    if new_email is not None and new_email != user.email:
        if await get_user_by_email(session, new_email) is not None:
            raise email_taken()

    for key, value in changes.items():
        setattr(user, key, value)

    if password:
        user.hashed_password = hash_password(password)

    await commit_or_raise(session, "更新用户")
    logger.info(f"用户已更新: id={user_id}, fields={sorted(changes) + (['password'] if password else [])}")


async def delete_user(session: AsyncSession, user_id: int) -> None:
    """
    删除用户（物理删除，不影响角色和权限）

    Raises:
        NotFoundError: 用户不存在
    """
    user = await get_user(session, user_id)
    if user is None:
        raise user_not_found()

    await session.delete(user)
    await commit_or_raise(session, "删除用户")
    logger.info(f"用户已删除: id={user_id}")
