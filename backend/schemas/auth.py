"""
认证数据验证
用户注册、登录、信息等
"""

import re
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def validate_email_format(email: str) -> str:
    """验证邮箱格式，返回去除首尾空白后的值"""
    email = email.strip()
    if not EMAIL_PATTERN.match(email):
        raise ValueError('请输入正确的邮箱地址')
    return email


class UserCreate(BaseModel):
    """用户注册"""
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=72)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('名称不能为空')
        return v.strip()

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return validate_email_format(v)


class UserLogin(BaseModel):
    """用户登录"""
    email: str
    password: str


class UserInfo(BaseModel):
    """用户信息"""
    id: int
    name: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
