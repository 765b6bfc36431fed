"""
密码哈希与校验

使用 bcrypt 存储用户密码：
- 每次哈希都生成新的随机盐，相同密码得到不同的哈希值（防彩虹表）
- 工作因子（rounds）可配置，默认读取 settings.bcrypt_rounds
- 校验失败一律返回 False，哈希格式损坏也不抛异常（fail closed）

使用示例：
    from app.auth.password import hash_password, verify_password

    hashed = hash_password("s3cret")
    assert verify_password("s3cret", hashed)
"""

import logging

import bcrypt

from app.config import get_settings

logger = logging.getLogger(__name__)

# bcrypt 只使用密码的前 72 字节，超出部分显式截断，保证各版本行为一致
BCRYPT_MAX_BYTES = 72


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plaintext: str, rounds: int | None = None) -> str:
    """
    生成密码哈希

    Args:
        plaintext: 明文密码
        rounds: bcrypt 工作因子，默认使用配置值

    Returns:
        str: 形如 $2b$12$... 的哈希字符串（盐内嵌在哈希中）
    """
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_encode(plaintext), salt).decode("utf-8")


def verify_password(plaintext: str, hashed: str | None) -> bool:
    """
    校验明文密码是否与哈希匹配

    使用哈希中内嵌的盐重新计算并做常量时间比较。
    哈希为空或格式损坏时返回 False，调用方无法区分"哈希损坏"和"密码错误"。
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_encode(plaintext), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        logger.warning("密码哈希格式无效，校验按失败处理")
        return False


def get_hash_rounds(hashed: str) -> int | None:
    """从 $2b$12$... 中解析工作因子，格式不对返回 None"""
    parts = hashed.split("$")
    if len(parts) < 4 or not parts[2].isdigit():
        return None
    return int(parts[2])


def needs_rehash(hashed: str, rounds: int | None = None) -> bool:
    """存储的哈希工作因子与当前配置不一致时返回 True"""
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    current = get_hash_rounds(hashed)
    return current is not None and current != rounds
