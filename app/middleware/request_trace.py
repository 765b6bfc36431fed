"""
请求追踪中间件

- 从 X-Request-ID 头获取请求 ID，或自动生成
- 在响应中返回 X-Request-ID 和 X-Response-Time
- 按状态码分级记录请求日志（路径、方法、耗时、状态码）

请求体不会被记录，登录/修改密码请求中的明文密码不会进入日志。
"""

import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.infra.logging import RequestTimer, get_logger, set_request_id, set_user_id

logger = get_logger(__name__)

# 高频低价值请求不记录成功日志
SKIP_PATHS = ("/healthz", "/favicon.ico")


class RequestTraceMiddleware(BaseHTTPMiddleware):
    """请求追踪中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_id(request_id)
        set_user_id(None)

        timer = RequestTimer()
        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = timer.elapsed_ms()
            logger.error(
                f"{request.method} {request.url.path} - 500 - {elapsed:.0f}ms",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": 500,
                    "duration_ms": elapsed,
                    "error": str(e),
                },
            )
            raise

        elapsed = timer.elapsed_ms()
        log_extra = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": elapsed,
        }
        message = f"{request.method} {request.url.path} - {response.status_code} - {elapsed:.0f}ms"

        if response.status_code >= 500:
            logger.error(message, extra=log_extra)
        elif response.status_code >= 400:
            logger.warning(message, extra=log_extra)
        elif request.url.path not in SKIP_PATHS:
            logger.info(message, extra=log_extra)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed:.0f}ms"
        return response
