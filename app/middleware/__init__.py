"""
中间件模块

- RequestTraceMiddleware: 请求追踪和日志记录
"""

from app.middleware.request_trace import RequestTraceMiddleware

__all__ = ["RequestTraceMiddleware"]
