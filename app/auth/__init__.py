"""
认证模块

- password.py : 密码哈希与校验（bcrypt）
"""

from app.auth.password import hash_password, needs_rehash, verify_password

__all__ = ["hash_password", "needs_rehash", "verify_password"]
