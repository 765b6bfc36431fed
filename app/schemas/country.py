"""国家列表响应模型"""

from pydantic import BaseModel, Field


class CountryInfo(BaseModel):
    """国家名称（通用名、官方名、各语言本地名）"""
    common_name: str
    official_name: str
    native_names: dict[str, str] = Field(default_factory=dict, description="语言代码 -> 本地通用名")
