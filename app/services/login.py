"""
登录与修改密码流程

登录状态机只有两个终态：
    Unauthenticated → Authenticated（返回授权视图）
    Unauthenticated → Rejected（UnauthorizedError）

安全设计：
- 邮箱不存在与密码错误返回完全相同的错误，避免泄露哪些邮箱已注册
- 邮箱不存在时仍对一个固定哈希做一次 bcrypt 校验，响应耗时与密码错误一致
- 凭证校验通过后才更新最后登录时间；该写入失败只记录告警，登录仍然成功
- 存储的哈希工作因子与配置不一致时，顺带用新因子重新哈希（同样尽力而为）
"""

from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.password import hash_password, needs_rehash, verify_password
from app.exceptions import InvalidInputError, UnauthorizedError
from app.infra.logging import get_logger, set_user_id
from app.models import User
from app.schemas.user import AuthorizationView
from app.services.authorization import build_authorization_view
from app.services.users import commit_or_raise, get_user, get_user_by_email, user_not_found

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    """邮箱不存在时用于陪跑校验的哈希"""
    return hash_password("not-a-real-password")


def _rejected() -> UnauthorizedError:
    return UnauthorizedError(INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")


async def _record_login(session: AsyncSession, user: User, password: str) -> None:
    """写入最后登录时间（尽力而为，失败不影响登录结果）"""
    user_id = user.id
    user.last_login_at = datetime.now(timezone.utc)
    if needs_rehash(user.hashed_password):
        user.hashed_password = hash_password(password)
        logger.info(f"密码哈希工作因子已升级: user_id={user_id}")

    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.warning(
            f"更新最后登录时间失败，登录仍视为成功: user_id={user_id}, error={e}",
            extra={"user_id": user_id},
        )


async def login(session: AsyncSession, email: str, password: str) -> AuthorizationView:
    """
    邮箱 + 密码登录

    Returns:
        AuthorizationView: 登录用户的授权视图

    Raises:
        UnauthorizedError: 邮箱不存在或密码错误（两者不可区分）
    """
    user = await get_user_by_email(session, email)
    if user is None:
        verify_password(password, _dummy_hash())
        raise _rejected()

    if not verify_password(password, user.hashed_password):
        raise _rejected()

    user_id = user.id
    await _record_login(session, user, password)
    set_user_id(str(user_id))
    logger.info(f"用户登录成功: user_id={user_id}")

    view = await build_authorization_view(session, user_id)
    if view is None:
        raise _rejected()
    return view


async def change_password(
    session: AsyncSession,
    user_id: int,
    current_password: str,
    new_password: str,
) -> None:
    """
    修改密码（必须先校验当前密码）

    Raises:
        NotFoundError: 用户不存在
        InvalidInputError: 当前密码错误
    """
    user = await get_user(session, user_id)
    if user is None:
        raise user_not_found()

    if not verify_password(current_password, user.hashed_password):
        raise InvalidInputError("Current password is incorrect", code="INVALID_CURRENT_PASSWORD")

    user.hashed_password = hash_password(new_password)
    await commit_or_raise(session, "修改密码")
    logger.info(f"密码已修改: user_id={user_id}")
