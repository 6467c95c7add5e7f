"""
博客数据验证模式
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class BlogCategory(str, Enum):
    """文章分类"""
    CAREER = "Career"
    FINANCE = "Finance"
    TRAVEL = "Travel"
    TECHNOLOGY = "Technology"
    LIFESTYLE = "Lifestyle"
    OTHER = "Other"


# 常见简写
CATEGORY_ALIASES = {
    "tech": BlogCategory.TECHNOLOGY,
}


def normalize_category(value: Any) -> Any:
    """
    将分类名规范为标准取值（大小写不敏感，支持简写）
    无法识别时原样返回，由调用方决定如何处理
    """
    if not isinstance(value, str):
        return value
    key = value.strip().lower()
    for category in BlogCategory:
        if category.value.lower() == key:
            return category.value
    if key in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[key].value
    return value


class BlogCreate(BaseModel):
    """创建文章"""
    title: str = Field(..., min_length=1, max_length=200)
    category: BlogCategory
    content: str = Field(..., min_length=1)
    image: Optional[str] = None

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """标题和内容不能只包含空白"""
        if not v.strip():
            raise ValueError("不能为空")
        return v

    @field_validator("category", mode="before")
    @classmethod
    def normalize(cls, v):
        return normalize_category(v)

    @field_validator("image")
    @classmethod
    def empty_image_as_none(cls, v):
        return v or None


class BlogUpdate(BaseModel):
    """
    更新文章（部分更新）

    - title/category/content 为空字符串或仅空白时视为未提供，保留原值
    - image 未提供时保留原值，显式传 null 或空字符串表示清除
    """
    title: Optional[str] = Field(None, max_length=200)
    category: Optional[BlogCategory] = None
    content: Optional[str] = None
    image: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def normalize(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return normalize_category(v)

    def changes(self) -> dict:
        """提取需要写入的字段"""
        values = {}
        for key in ("title", "category", "content"):
            value = getattr(self, key)
            if value is None:
                continue
            if isinstance(value, BlogCategory):
                value = value.value
            elif not value.strip():
                continue
            values[key] = value
        if "image" in self.model_fields_set:
            values["image"] = self.image or None
        return values


class BlogOwner(BaseModel):
    """文章所有者"""
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class BlogInfo(BaseModel):
    """文章信息"""
    id: int
    title: str
    category: str
    author: str
    content: str
    image: Optional[str]
    user_id: int
    user: Optional[BlogOwner] = Field(None, validation_alias="owner")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
