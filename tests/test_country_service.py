"""
国家列表服务测试

测试 app/services/countries.py：
- restcountries 响应解析
- 读穿缓存（命中时不再请求第三方接口）
- 第三方接口失败时不写缓存
"""

import httpx
import pytest

from app.exceptions import ExternalServiceError
from app.infra.cache import MemoryCache
from app.services.countries import COUNTRY_CACHE_KEY, CountryService, parse_countries

API_URL = "https://restcountries.example/v3.1/all?fields=name"

SAMPLE_PAYLOAD = [
    {
        "name": {
            "common": "Peru",
            "official": "Republic of Peru",
            "nativeName": {
                "aym": {"official": "Piruw Suyu", "common": "Piruw"},
                "spa": {"official": "República del Perú", "common": "Perú"},
            },
        }
    },
    {"name": {"common": "Chile", "official": "Republic of Chile"}},
    {"name": {"official": "No Common Name"}},
    "not-an-object",
]


def _service(handler, cache=None) -> CountryService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CountryService(
        cache or MemoryCache("test:"),
        api_url=API_URL,
        ttl_seconds=43200,
        http_client=client,
    )


class TestParseCountries:
    """测试响应解析"""

    def test_parse(self):
        countries = parse_countries(SAMPLE_PAYLOAD)

        assert [c.common_name for c in countries] == ["Peru", "Chile"]
        peru = countries[0]
        assert peru.official_name == "Republic of Peru"
        assert peru.native_names == {"aym": "Piruw", "spa": "Perú"}
        assert countries[1].native_names == {}

    def test_official_name_falls_back_to_common(self):
        countries = parse_countries([{"name": {"common": "Atlantis"}}])

        assert countries[0].official_name == "Atlantis"

    def test_not_a_list(self):
        with pytest.raises(ValueError):
            parse_countries({"message": "rate limited"})


class TestCountryService:
    """测试读穿缓存"""

    @pytest.mark.asyncio
    async def test_fetch_then_cache_hit(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            return httpx.Response(200, json=SAMPLE_PAYLOAD)

        service = _service(handler)

        first = await service.get_countries()
        second = await service.get_countries()

        assert len(calls) == 1
        assert first == second
        assert [c.common_name for c in second] == ["Peru", "Chile"]

    @pytest.mark.asyncio
    async def test_cache_expiry_refetches(self):
        now = [0.0]
        cache = MemoryCache("test:", clock=lambda: now[0])
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=SAMPLE_PAYLOAD)

        service = _service(handler, cache)

        await service.get_countries()
        now[0] += 43200
        await service.get_countries()

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_upstream_error_not_cached(self):
        responses = [httpx.Response(503, text="unavailable"), httpx.Response(200, json=SAMPLE_PAYLOAD)]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        cache = MemoryCache("test:")
        service = _service(handler, cache)

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.get_countries()

        assert exc_info.value.status_code == 502
        assert exc_info.value.code == "COUNTRY_LOOKUP_FAILED"
        assert await cache.get_json(COUNTRY_CACHE_KEY) is None

        countries = await service.get_countries()
        assert len(countries) == 2

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = _service(handler)

        with pytest.raises(ExternalServiceError):
            await service.get_countries()

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": 404})

        service = _service(handler)

        with pytest.raises(ExternalServiceError):
            await service.get_countries()
