"""
数据模型层 (ORM Models)

数据模型关系图：
    Role (角色) ──< RolePermission >── Permission (权限)
      │
      └──< User (用户)

核心概念：
- User: 目录中的用户，恰好属于一个角色
- Role: 权限的命名集合
- Permission: 命名的能力标识
- RolePermission: 角色与权限的显式关联实体
"""

from app.models.permission import Permission
from app.models.role import Role
from app.models.role_permission import RolePermission
from app.models.user import User

__all__ = [
    "Permission",
    "Role",
    "RolePermission",
    "User",
]
