import logging
from core.events import event_bus, Events, Event

logger = logging.getLogger(__name__)


async def on_user_register(event: Event):
    """新用户注册"""
    logger.info(f"新用户注册: user_id={event.data.get('user_id')}")


async def on_blog_changed(event: Event):
    """文章创建、更新、删除"""
    action = event.name.rsplit(".", 1)[-1]
    logger.info(
        f"文章{action}: id={event.data.get('id')} user_id={event.data.get('user_id')}"
    )


def register_event_handlers():
    """注册所有事件处理器"""
    event_bus.subscribe(Events.USER_REGISTER, on_user_register)
    for name in (Events.BLOG_CREATED, Events.BLOG_UPDATED, Events.BLOG_DELETED):
        event_bus.subscribe(name, on_blog_changed)
    logger.info("已注册系统事件处理器")
