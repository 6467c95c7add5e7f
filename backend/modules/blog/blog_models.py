"""
博客数据模型
表名遵循隔离协议：blog_前缀
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from models import User


class Blog(Base):
    """博客文章"""
    __tablename__ = "blog_posts"
    __table_args__ = {"extend_existing": True, "comment": "博客文章表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200))
    category: Mapped[str] = mapped_column(String(20), index=True)  # 取值见 BlogCategory
    # 创建时复制的作者名，用户改名后不会同步
    author: Mapped[str] = mapped_column(String(100), index=True)
    content: Mapped[str] = mapped_column(Text)
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # 图片URL或内联 data URI

    # 所有者（创建后不可转移）
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True
    )

    # 时间
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    # 关联关系
    owner: Mapped["User"] = relationship("User", lazy="selectin", viewonly=True)
