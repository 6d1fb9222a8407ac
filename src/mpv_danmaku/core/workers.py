import logging
import threading
from typing import Callable, Protocol

from .models.danmaku import DanmakuTrack


class CancelToken(Protocol):
    """加载流程用来感知取消的接口，由 BaseWorker 实现"""

    def is_cancelled(self) -> bool: ...

    def add_cancel_callback(self, callback: Callable[[], None]) -> None: ...


class BaseWorker(threading.Thread):
    """
    所有后台任务线程的基类。
    提供取消标记和日志记录等通用功能；取消后任务的结果会被丢弃。
    """
    def __init__(self, name: str | None = None):
        super().__init__(name=name, daemon=True)
        self.logger = logging.getLogger(self.__class__.__name__)
        self._cancel_event = threading.Event()
        self._callback_lock = threading.Lock()
        self._cancel_callbacks: list[Callable[[], None]] = []

    def cancel(self):
        """设置取消标记，并执行已登记的清理动作（如关闭网络会话）"""
        with self._callback_lock:
            if self._cancel_event.is_set():
                return
            self._cancel_event.set()
            callbacks, self._cancel_callbacks = self._cancel_callbacks, []

        for callback in callbacks:
            callback()

    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def add_cancel_callback(self, callback: Callable[[], None]):
        """登记取消时执行的动作；已取消时立即执行"""
        with self._callback_lock:
            if not self._cancel_event.is_set():
                self._cancel_callbacks.append(callback)
                return
        callback()


class FetchWorker(BaseWorker):
    """
    用于后台加载弹幕的线程，网络等待全部发生在共享数据的锁之外。
    previous 为被本任务取代的上一个任务：先等它结束再开始加载，保证同一时刻只有一个加载在进行。
    """
    def __init__(self, media: str,
                 loader: Callable[[str, CancelToken], DanmakuTrack],
                 on_success: Callable[['FetchWorker', DanmakuTrack], None],
                 on_error: Callable[['FetchWorker', Exception], None],
                 previous: BaseWorker | None = None):
        super().__init__(name="DanmakuFetch")
        self.media = media
        self.loader = loader
        self.on_success = on_success
        self.on_error = on_error
        self.previous = previous

    def run(self):
        if self.previous is not None:
            self.previous.join()
            self.previous = None

        if self.is_cancelled():
            self.logger.debug(f"加载任务在开始前已取消: {self.media}")
            return

        try:
            track = self.loader(self.media, self)
        except Exception as e:
            if self.is_cancelled():
                self.logger.debug(f"已取消的加载任务出错，忽略: {e}")
                return
            self.on_error(self, e)
            return

        if self.is_cancelled():
            self.logger.debug(f"加载任务已取消，丢弃 {len(track)} 条弹幕。")
            return
        self.on_success(self, track)
