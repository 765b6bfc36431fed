"""
角色模型 (Role)

角色是一组权限的命名集合，每个用户恰好属于一个角色。
角色与权限是多对多关系，通过 RolePermission 关联表显式建模。

角色在系统启动时由种子数据写入（Admin / Operator / Client），运行期不增删。
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import INT_PK


class Role(Base):
    """角色表"""
    __tablename__ = "roles"

    id: Mapped[INT_PK]

    # 角色显示名称，全局唯一，种子数据按名称幂等匹配
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
