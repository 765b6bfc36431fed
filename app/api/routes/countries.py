"""
国家列表接口

供前端注册/编辑用户时选择居住国家，数据来自第三方接口并缓存 12 小时。
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_country_service
from app.schemas.country import CountryInfo
from app.services.countries import CountryService

router = APIRouter(prefix="/countries", tags=["countries"])


@router.get("", response_model=list[CountryInfo])
async def list_countries(
    service: CountryService = Depends(get_country_service),
) -> list[CountryInfo]:
    """获取国家名称列表"""
    return await service.get_countries()
