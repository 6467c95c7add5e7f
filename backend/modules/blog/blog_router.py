"""
博客API路由
RESTful风格，读取公开，写入需要登录
"""

from typing import Optional
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.errors import ErrorCode, NotFoundException
from core.security import get_current_user, TokenData
from core.events import event_bus, Events
from schemas import success

from .blog_schemas import BlogCreate, BlogUpdate, BlogInfo
from .blog_services import BlogService

router = APIRouter(prefix="/blogs", tags=["博客"])


def _serialize(blog) -> dict:
    return BlogInfo.model_validate(blog).model_dump()


# Integer 主键上限
MAX_BLOG_ID = 2**31 - 1


def blog_id_path(blog_id: str = Path(..., description="文章ID")) -> int:
    """无法解析或超出主键范围的ID按文章不存在处理"""
    try:
        value = int(blog_id)
    except ValueError:
        raise NotFoundException("文章", blog_id, code=ErrorCode.BLOG_NOT_FOUND)
    if not 0 < value <= MAX_BLOG_ID:
        raise NotFoundException("文章", blog_id, code=ErrorCode.BLOG_NOT_FOUND)
    return value


@router.get("")
@router.get("/", include_in_schema=False)
async def list_blogs(
    category: Optional[str] = Query(None, description="分类（不区分大小写，支持简写）"),
    author: Optional[str] = Query(None, description="作者名（不区分大小写的子串）"),
    db: AsyncSession = Depends(get_db)
):
    """获取文章列表（公开）"""
    service = BlogService(db)
    blogs = await service.list_blogs(category=category, author=author)
    return success({"blogs": [_serialize(b) for b in blogs]}, "获取文章列表成功")


# 具体路径需放在 /{blog_id} 之前
@router.get("/user/my-blogs")
async def list_my_blogs(
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(get_current_user)
):
    """获取我的文章列表"""
    service = BlogService(db)
    blogs = await service.list_user_blogs(user.user_id)
    return success({"blogs": [_serialize(b) for b in blogs]}, "获取我的文章成功")


@router.get("/{blog_id}")
async def get_blog(
    blog_id: int = Depends(blog_id_path),
    db: AsyncSession = Depends(get_db)
):
    """获取文章详情（公开）"""
    service = BlogService(db)
    blog = await service.get_blog(blog_id)
    return success({"blog": _serialize(blog)}, "获取文章成功")


@router.post("", status_code=status.HTTP_201_CREATED)
@router.post("/", status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_blog(
    data: BlogCreate,
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(get_current_user)
):
    """创建文章"""
    service = BlogService(db)
    blog = await service.create_blog(data, user.user_id)

    # 发布事件
    event_bus.emit(Events.BLOG_CREATED, "blog", {
        "id": blog.id,
        "title": blog.title,
        "user_id": user.user_id
    })

    return success({"blog": _serialize(blog)}, "创建成功")


@router.put("/{blog_id}")
async def update_blog(
    data: BlogUpdate,
    blog_id: int = Depends(blog_id_path),
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(get_current_user)
):
    """更新文章（仅作者本人）"""
    service = BlogService(db)
    blog = await service.update_blog(blog_id, data, user.user_id)

    event_bus.emit(Events.BLOG_UPDATED, "blog", {
        "id": blog_id,
        "user_id": user.user_id
    })

    return success({"blog": _serialize(blog)}, "更新成功")


@router.delete("/{blog_id}")
async def delete_blog(
    blog_id: int = Depends(blog_id_path),
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(get_current_user)
):
    """删除文章（仅作者本人）"""
    service = BlogService(db)
    await service.delete_blog(blog_id, user.user_id)

    event_bus.emit(Events.BLOG_DELETED, "blog", {
        "id": blog_id,
        "user_id": user.user_id
    })

    return success(message="删除成功")
