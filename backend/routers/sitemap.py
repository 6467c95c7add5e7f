"""
站点地图
静态页面 + 每篇文章详情页
"""

import logging
from datetime import date, datetime
from typing import Iterable, Optional
from xml.etree import ElementTree as ET

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.database import get_db
from modules.blog.blog_models import Blog

logger = logging.getLogger(__name__)
router = APIRouter(tags=["站点地图"])

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"

# (路径, 更新频率, 优先级)
STATIC_PAGES = [
    ("/", "daily", "1.0"),
    ("/blogs", "daily", "0.9"),
]


def _add_url(urlset: ET.Element, loc: str, lastmod: str, changefreq: str, priority: str):
    url = ET.SubElement(urlset, "url")
    ET.SubElement(url, "loc").text = loc
    ET.SubElement(url, "lastmod").text = lastmod
    ET.SubElement(url, "changefreq").text = changefreq
    ET.SubElement(url, "priority").text = priority


def build_sitemap(
    base_url: str,
    blogs: Iterable[tuple[int, Optional[datetime], datetime]],
    today: Optional[date] = None
) -> str:
    """
    生成站点地图 XML

    Args:
        base_url: 前端站点地址
        blogs: (id, updated_at, created_at) 序列
        today: 静态页面的 lastmod，默认当天
    """
    base_url = base_url.rstrip("/")
    today_str = (today or date.today()).isoformat()

    urlset = ET.Element("urlset", xmlns=SITEMAP_NS)
    for path, changefreq, priority in STATIC_PAGES:
        _add_url(urlset, f"{base_url}{path}", today_str, changefreq, priority)

    for blog_id, updated_at, created_at in blogs:
        lastmod = (updated_at or created_at).date().isoformat()
        _add_url(urlset, f"{base_url}/blog/{blog_id}", lastmod, "weekly", "0.8")

    ET.indent(urlset, space="  ")
    body = ET.tostring(urlset, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'


@router.get("/sitemap.xml", include_in_schema=False)
async def sitemap(db: AsyncSession = Depends(get_db)):
    """站点地图"""
    result = await db.execute(
        select(Blog.id, Blog.updated_at, Blog.created_at).order_by(Blog.id)
    )
    xml = build_sitemap(get_settings().client_url, result.all())
    return Response(content=xml, media_type="application/xml")
