class UserDirectoryError(Exception):
    """业务错误基类，由 main.py 中的异常处理器统一映射为 HTTP 响应"""

    status_code = 500
    code = "UNKNOWN_ERROR"

    def __init__(self, detail: str, code: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if code:
            self.code = code


class NotFoundError(UserDirectoryError):
    """按 id / 邮箱查询不到记录"""

    status_code = 404
    code = "NOT_FOUND"


class ConflictError(UserDirectoryError):
    """唯一性冲突（邮箱已注册）"""

    status_code = 400
    code = "CONFLICT"


class UnauthorizedError(UserDirectoryError):
    """登录凭证错误"""

    status_code = 401
    code = "UNAUTHORIZED"


class InvalidInputError(UserDirectoryError):
    """请求内容不合法（当前密码错误、违反外键等）"""

    status_code = 400
    code = "INVALID_INPUT"


class InternalError(UserDirectoryError):
    """存储层或传输层的意外故障"""

    status_code = 500
    code = "INTERNAL_ERROR"


class ExternalServiceError(UserDirectoryError):
    """第三方接口调用失败"""

    status_code = 502
    code = "EXTERNAL_SERVICE_ERROR"
