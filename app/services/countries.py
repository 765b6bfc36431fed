"""
国家列表服务

调用 restcountries 接口获取国家名称，解析后读穿缓存：
1. 先查缓存，命中直接返回
2. 未命中则请求第三方接口并解析
3. 解析结果写入缓存（默认 12 小时过期）

第三方接口失败时抛出 ExternalServiceError，失败结果不写入缓存。
"""

import logging
from typing import Any

import httpx

from app.config import get_settings
from app.exceptions import ExternalServiceError
from app.infra.cache import BaseCache, get_cache
from app.schemas.country import CountryInfo

logger = logging.getLogger(__name__)

COUNTRY_CACHE_KEY = "countries:names"


def parse_countries(payload: Any) -> list[CountryInfo]:
    """
    解析 restcountries 响应

    输入格式：
        [{"name": {"common": "Peru", "official": "Republic of Peru",
                   "nativeName": {"spa": {"common": "Perú", "official": "..."}}}}, ...]

    没有通用名的条目会被跳过。
    """
    if not isinstance(payload, list):
        raise ValueError("国家列表响应不是 JSON 数组")

    countries = []
    for item in payload:
        name = item.get("name") if isinstance(item, dict) else None
        if not isinstance(name, dict) or not name.get("common"):
            continue

        native_names = {}
        for lang, entry in (name.get("nativeName") or {}).items():
            if isinstance(entry, dict) and entry.get("common"):
                native_names[lang] = entry["common"]

        countries.append(CountryInfo(
            common_name=name["common"],
            official_name=name.get("official") or name["common"],
            native_names=native_names,
        ))
    return countries


class CountryService:
    """国家列表读穿缓存"""

    def __init__(
        self,
        cache: BaseCache,
        *,
        api_url: str,
        ttl_seconds: int,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.cache = cache
        self.api_url = api_url
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self._http_client = http_client

    async def _fetch(self) -> Any:
        if self._http_client is not None:
            response = await self._http_client.get(self.api_url)
            response.raise_for_status()
            return response.json()

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.api_url)
            response.raise_for_status()
            return response.json()

    async def get_countries(self) -> list[CountryInfo]:
        cached = await self.cache.get_json(COUNTRY_CACHE_KEY)
        if cached is not None:
            return [CountryInfo.model_validate(c) for c in cached]

        try:
            payload = await self._fetch()
            countries = parse_countries(payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"获取国家列表失败: {e}")
            raise ExternalServiceError(
                "Country lookup service unavailable",
                code="COUNTRY_LOOKUP_FAILED",
            ) from e

        await self.cache.set_json(
            COUNTRY_CACHE_KEY,
            [c.model_dump() for c in countries],
            self.ttl_seconds,
        )
        logger.info(f"国家列表已刷新: {len(countries)} 条")
        return countries


def get_country_service() -> CountryService:
    """FastAPI 依赖：使用全局缓存单例构建服务"""
    settings = get_settings()
    return CountryService(
        get_cache(),
        api_url=settings.country_api_url,
        ttl_seconds=settings.country_cache_ttl,
        timeout=settings.country_api_timeout,
    )
