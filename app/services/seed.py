"""
种子数据初始化

应用启动时执行，幂等写入：
- 固定角色：Admin / Operator / Client
- 固定权限：CreateUser / EditUser / DeleteUser / ReadUsers / ReadOwnData
- 角色授权：Admin 拥有全部权限；Operator 可编辑、读取用户；Client 只能读取自己的数据
- 初始管理员账号（settings.bootstrap_admin_*）；非开发环境必须显式配置密码或密码哈希

按名称 / 邮箱匹配已有记录，重复执行不会新增任何行。
写入数据库后，数据库即为唯一事实来源，运行期不再读取这里的常量。
"""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.password import hash_password
from app.config import Settings, get_settings
from app.exceptions import InternalError
from app.infra.logging import get_logger
from app.models import Permission, Role, RolePermission, User
from app.services.users import get_user_by_email

logger = get_logger(__name__)

ADMIN_ROLE = "Admin"
OPERATOR_ROLE = "Operator"
CLIENT_ROLE = "Client"

SEED_ROLES = (ADMIN_ROLE, OPERATOR_ROLE, CLIENT_ROLE)

SEED_PERMISSIONS = (
    "CreateUser",
    "EditUser",
    "DeleteUser",
    "ReadUsers",
    "ReadOwnData",
)

SEED_GRANTS: dict[str, tuple[str, ...]] = {
    ADMIN_ROLE: SEED_PERMISSIONS,
    OPERATOR_ROLE: ("EditUser", "ReadUsers"),
    CLIENT_ROLE: ("ReadOwnData",),
}

# 唯一约束冲突时的最大尝试次数
SEED_ATTEMPTS = 2


@dataclass
class SeedResult:
    """本次新增的行数，全部为 0 表示数据已就绪"""
    roles: int = 0
    permissions: int = 0
    grants: int = 0
    admin_created: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.roles or self.permissions or self.grants or self.admin_created)


async def _ensure_named(session: AsyncSession, model, names: tuple[str, ...]) -> tuple[dict, int]:
    """确保每个名称都有一行记录，返回 (name -> 实例, 新增数量)"""
    result = await session.execute(select(model).where(model.name.in_(names)))
    rows = {row.name: row for row in result.scalars().all()}

    added = 0
    for name in names:
        if name not in rows:
            rows[name] = model(name=name)
            session.add(rows[name])
            added += 1
    return rows, added


def _admin_password_hash(settings: Settings) -> str | None:
    """
    初始管理员的密码哈希

    优先使用预先计算好的哈希；非开发环境下如果既没有哈希也没有显式配置明文密码，
    返回 None（不能使用代码中的默认密码）。
    """
    if settings.bootstrap_admin_password_hash:
        return settings.bootstrap_admin_password_hash
    if not settings.is_dev and "bootstrap_admin_password" not in settings.model_fields_set:
        return None
    return hash_password(settings.bootstrap_admin_password)


async def _apply_seed(session: AsyncSession, settings: Settings) -> SeedResult:
    """补齐缺失的种子数据（不提交）"""
    seed = SeedResult()

    roles, seed.roles = await _ensure_named(session, Role, SEED_ROLES)
    permissions, seed.permissions = await _ensure_named(session, Permission, SEED_PERMISSIONS)
    await session.flush()  # 获取新行的 id

    existing = await session.execute(select(RolePermission.role_id, RolePermission.permission_id))
    granted = {(role_id, permission_id) for role_id, permission_id in existing.all()}

    for role_name, permission_names in SEED_GRANTS.items():
        for permission_name in permission_names:
            pair = (roles[role_name].id, permissions[permission_name].id)
            if pair in granted:
                continue
            session.add(RolePermission(role_id=pair[0], permission_id=pair[1]))
            granted.add(pair)
            seed.grants += 1

    if await get_user_by_email(session, settings.bootstrap_admin_email) is None:
        hashed = _admin_password_hash(settings)
        if hashed is None:
            logger.error(
                "未配置 BOOTSTRAP_ADMIN_PASSWORD_HASH 或 BOOTSTRAP_ADMIN_PASSWORD，"
                f"跳过创建初始管理员: environment={settings.environment}"
            )
        else:
            session.add(User(
                full_name=settings.bootstrap_admin_name,
                email=settings.bootstrap_admin_email,
                hashed_password=hashed,
                country=settings.bootstrap_admin_country,
                role_id=roles[ADMIN_ROLE].id,
            ))
            seed.admin_created = True

    return seed


async def seed_initial_data(session: AsyncSession, settings: Settings | None = None) -> SeedResult:
    """
    幂等写入种子数据

    多个实例同时启动时可能写入同名记录，唯一约束冲突后回滚并重新检查一次。

    Args:
        session: 数据库会话
        settings: 配置，默认使用全局配置

    Returns:
        SeedResult: 本次新增的数据统计

    Raises:
        InternalError: 重试后仍然冲突，或存储层故障
    """
    settings = settings or get_settings()

    for attempt in range(1, SEED_ATTEMPTS + 1):
        try:
            seed = await _apply_seed(session, settings)
            await session.commit()
            break
        except IntegrityError as e:
            await session.rollback()
            if attempt == SEED_ATTEMPTS:
                logger.error(f"写入种子数据失败，重试后仍然冲突: {e.orig}")
                raise InternalError("Seed data could not be written", code="SEED_CONFLICT") from e
            logger.warning(f"写入种子数据冲突（其他实例可能正在初始化），重新检查: {e.orig}")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"写入种子数据失败，存储层异常: {e}")
            raise InternalError("Storage failure") from e

    if seed.changed:
        logger.info(
            f"种子数据已写入: roles={seed.roles}, permissions={seed.permissions}, "
            f"grants={seed.grants}, admin_created={seed.admin_created}"
        )
    return seed
