"""
角色-权限关联模型 (RolePermission)

显式的多对多关联实体，拥有独立主键。

约束：
- (role_id, permission_id) 唯一，同一权限不会重复授予同一角色
- 删除角色或权限时，关联行级联删除
"""

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import INT_PK


class RolePermission(Base):
    """角色-权限关联表"""
    __tablename__ = "role_permissions"

    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )

    id: Mapped[INT_PK]

    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    permission_id: Mapped[int] = mapped_column(
        ForeignKey("permissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
