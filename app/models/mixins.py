"""
模型混入类 (Mixins)

通过多重继承为模型添加通用字段。

使用示例：
    class MyModel(TimestampMixin, Base):
        __tablename__ = "my_table"
        id: Mapped[INT_PK]
"""

from datetime import datetime
from typing import Annotated

from sqlalchemy import BigInteger, DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

# ==================== 类型别名 ====================
# 自增整数主键；SQLite 只有 INTEGER PRIMARY KEY 才会自增，因此用 variant 适配
INT_PK = Annotated[
    int,
    mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    ),
]


class TimestampMixin:
    """
    时间戳混入类

    - created_at: 插入时由数据库设置
    - updated_at: 每次 UPDATE 时由数据库刷新
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
