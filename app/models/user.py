"""
用户模型 (User)

用户是目录中的身份记录，以邮箱作为登录标识，恰好关联一个角色。

安全设计：
- 密码只保存 bcrypt 哈希，永不明文保存，也不出现在任何响应中
- 邮箱全局唯一，按大小写敏感的精确值比较
- 删除为物理删除，不保留墓碑记录
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import INT_PK, TimestampMixin


class User(TimestampMixin, Base):
    """
    用户表

    字段说明：
    - id: 自增主键，创建后不变
    - full_name: 姓名
    - email: 登录邮箱，唯一
    - hashed_password: 密码哈希
    - country: 居住国家
    - last_login_at: 最后登录时间，首次登录前为空
    - role_id: 所属角色（外键）
    """
    __tablename__ = "users"

    id: Mapped[INT_PK]

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    country: Mapped[str] = mapped_column(String(100), nullable=False)

    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # 角色被用户引用时禁止删除角色
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
