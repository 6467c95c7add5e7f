"""
事件总线
路由在写操作完成后发布事件，订阅者（日志等）在后台处理，
处理器出错不会影响已经完成的请求。
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Set, Union

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """事件数据结构"""
    name: str
    source: str  # 发布方，如 "auth"、"blog"
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventHandler = Callable[[Event], Union[None, Awaitable[None]]]


class EventBus:
    """进程内事件总线"""

    def __init__(self, max_history: int = 1000):
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._history: Deque[Event] = deque(maxlen=max_history)
        # emit 创建的后台任务，需持有引用直到完成
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, event_name: str, handler: EventHandler):
        """订阅事件，同一处理器重复订阅只记一次"""
        handlers = self._handlers.setdefault(event_name, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(f"订阅事件: {event_name} -> {getattr(handler, '__name__', handler)}")

    def unsubscribe(self, event_name: str, handler: EventHandler):
        """取消订阅"""
        handlers = self._handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers(self, event_name: str) -> List[EventHandler]:
        return list(self._handlers.get(event_name, []))

    async def publish(self, event: Event) -> int:
        """
        发布事件并依次调用处理器

        Returns:
            成功执行的处理器数量
        """
        self._history.append(event)
        logger.debug(f"发布事件: {event.name} 来自 {event.source}")

        handled = 0
        for handler in self.handlers(event.name):
            try:
                result = handler(event)
                if asyncio.iscoroutine(result):
                    await result
                handled += 1
            except Exception as e:
                logger.error(f"事件处理错误 {event.name}: {e}", exc_info=e)
        return handled

    def emit(self, name: str, source: str, data: Optional[Dict[str, Any]] = None):
        """
        在后台发布事件，不等待处理器
        没有运行中的事件循环时只记录历史
        """
        event = Event(name=name, source=source, data=data or {})
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._history.append(event)
            logger.debug(f"没有运行中的事件循环，仅记录事件: {name}")
            return

        task = loop.create_task(self.publish(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self):
        """等待所有后台发布完成（关闭时调用）"""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    def get_history(self, event_name: Optional[str] = None, limit: int = 100) -> List[Event]:
        """获取事件历史"""
        events = [e for e in self._history if event_name is None or e.name == event_name]
        return events[-limit:]


# 全局事件总线实例
event_bus = EventBus()


class Events:
    """事件名称"""
    SYSTEM_STARTUP = "system.startup"
    SYSTEM_SHUTDOWN = "system.shutdown"

    USER_REGISTER = "user.register"
    USER_LOGIN = "user.login"

    BLOG_CREATED = "blog.created"
    BLOG_UPDATED = "blog.updated"
    BLOG_DELETED = "blog.deleted"
