"""
SQLAlchemy ORM 基类

Base.metadata 收集所有模型的表结构，init_models() 据此建表。
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """声明式基类，模型继承后自动注册到 Base.metadata"""
    pass
