"""
结构化日志测试

测试 app/infra/logging.py 的 JSON 输出和请求上下文关联。
"""

import json
import logging

import pytest

from app.infra.logging import ConsoleFormatter, JSONFormatter, set_request_id, set_user_id


@pytest.fixture(autouse=True)
def reset_context():
    set_request_id(None)
    set_user_id(None)
    yield
    set_request_id(None)
    set_user_id(None)


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("app.services.users", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """测试 JSON 格式"""

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record("用户已创建")))

        assert data["level"] == "INFO"
        assert data["logger"] == "app.services.users"
        assert data["message"] == "用户已创建"
        assert "request_id" not in data

    def test_context_and_extra(self):
        set_request_id("req-1")
        set_user_id("42")

        data = json.loads(JSONFormatter().format(_record("登录成功", duration_ms=12.5)))

        assert data["request_id"] == "req-1"
        assert data["user_id"] == "42"
        assert data["extra"] == {"duration_ms": 12.5}


class TestConsoleFormatter:
    """测试控制台格式"""

    def test_contains_request_id_prefix(self):
        set_request_id("abcdef123456")

        line = ConsoleFormatter().format(_record("hello"))

        assert "[abcdef12]" in line
        assert "app.services.users - hello" in line
