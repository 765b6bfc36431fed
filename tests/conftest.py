"""
测试公共夹具

- 每个测试使用独立的内存 SQLite 数据库（StaticPool 保证所有会话共享同一连接）
- 自动建表并写入种子数据（角色、权限、授权、初始管理员）
- HTTP 测试通过 ASGITransport 直接调用应用，不启动服务器
"""

import os

# 设置测试环境变量（必须在导入 app 模块之前）
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"  # 降低工作因子，加快测试
os.environ.pop("REDIS_URL", None)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.auth.password import hash_password  # noqa: E402
from app.db.session import build_engine, get_db, init_models  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Role, User  # noqa: E402
from app.services.seed import seed_initial_data  # noqa: E402


@pytest_asyncio.fixture
async def engine():
    """内存数据库引擎"""
    test_engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await init_models(bind=test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        await seed_initial_data(session)
    return factory


@pytest_asyncio.fixture
async def session(session_factory):
    """已写入种子数据的数据库会话"""
    async with session_factory() as db:
        yield db


@pytest.fixture
def make_user(session):
    """
    直接写库创建用户的工厂

    用法：
        user = await make_user(email="ana@example.com", role="Client")
    """

    async def _make_user(
        email: str = "ana@example.com",
        password: str = "Secret123!",
        role: str = "Client",
        full_name: str = "Ana Torres",
        country: str = "Peru",
        rounds: int | None = None,
    ) -> User:
        result = await session.execute(select(Role).where(Role.name == role))
        role_row = result.scalar_one()
        user = User(
            full_name=full_name,
            email=email,
            hashed_password=hash_password(password, rounds=rounds),
            country=country,
            role_id=role_row.id,
        )
        session.add(user)
        await session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def role_ids(session) -> dict[str, int]:
    """角色名称 -> ID"""
    result = await session.execute(select(Role.name, Role.id))
    return dict(result.all())


@pytest_asyncio.fixture
async def client(session_factory):
    """绑定测试数据库的 HTTP 客户端"""

    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()
