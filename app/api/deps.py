"""
API 依赖注入函数

使用示例：
    @router.get("/example")
    async def example_endpoint(
        db: AsyncSession = Depends(get_db_session),
        countries: CountryService = Depends(get_country_service),
    ):
        pass
"""

from app.db.session import get_db
from app.services.countries import get_country_service

# 重新导出，方便路由模块统一从这里导入
get_db_session = get_db

__all__ = ["get_country_service", "get_db_session"]
