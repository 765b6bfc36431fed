"""
FastAPI 应用实例

负责：
1. 创建 FastAPI 应用实例
2. 配置应用生命周期（建表、写入种子数据、释放缓存连接）
3. 注册所有 API 路由
4. 配置结构化日志、请求追踪和统一错误响应
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.routes import api_router
from app.config import get_settings
from app.db.session import SessionLocal, init_models
from app.exceptions import UserDirectoryError
from app.infra.cache import get_cache
from app.infra.logging import get_logger, setup_logging
from app.middleware import RequestTraceMiddleware
from app.services.seed import seed_initial_data

setup_logging()
logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理器

    - 开发/测试环境：根据模型自动建表
    - 所有环境：幂等写入角色、权限、授权和初始管理员
    """
    logger.info(f"应用启动中... 环境: {settings.environment}")

    if settings.is_dev:
        await init_models()
        logger.info("数据库表初始化完成（开发模式）")
    else:
        logger.info("跳过自动建表，请确认数据库结构已就绪")

    async with SessionLocal() as session:
        await seed_initial_data(session, settings)

    yield

    await get_cache().close()
    logger.info("应用已关闭")


app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
)

# 注册中间件
app.add_middleware(RequestTraceMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


def _error_response(status_code: int, code: str, detail, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "code": code},
        headers=headers,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(_: Request, exc: HTTPException):
    """
    统一错误响应格式：
    {
        "detail": "<错误信息>",
        "code": "<ERROR_CODE>"
    }
    """
    code = "UNKNOWN_ERROR"
    detail = exc.detail
    if isinstance(exc.detail, dict):
        code = exc.detail.get("code") or code
        detail = exc.detail.get("detail") or exc.detail.get("message") or detail
    return _error_response(exc.status_code, code, detail, exc.headers)


@app.exception_handler(UserDirectoryError)
async def user_directory_exception_handler(_: Request, exc: UserDirectoryError):
    # 业务错误：状态码和错误码由异常类型决定
    return _error_response(exc.status_code, exc.code, exc.detail)


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(_: Request, exc: SQLAlchemyError):
    # 未被 service 层处理的存储故障，不向调用方暴露内部细节
    logger.error(f"存储层异常: {exc}")
    return _error_response(500, "INTERNAL_ERROR", "Storage failure")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError):
    # 将 Pydantic 校验错误统一映射为 VALIDATION_ERROR
    return _error_response(422, "VALIDATION_ERROR", jsonable_encoder(exc.errors()))


@app.exception_handler(Exception)
async def unhandled_exception_handler(_: Request, exc: Exception):
    # 兜底：未预期的异常也返回统一错误格式
    logger.error(f"未处理的异常: {type(exc).__name__}: {exc}", exc_info=exc)
    return _error_response(500, "INTERNAL_ERROR", "Internal server error")
