"""
权限模型 (Permission)

权限是一个命名的能力标识，例如 CreateUser、ReadUsers。
通过 RolePermission 授予给角色，用户经由所属角色间接获得权限。
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import INT_PK


class Permission(Base):
    """权限表"""
    __tablename__ = "permissions"

    id: Mapped[INT_PK]

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
