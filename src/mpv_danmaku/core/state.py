import logging
import threading
from dataclasses import dataclass, asdict
from typing import Callable

from .models.danmaku import DanmakuTrack, Source
from .models.structs import Placement
from .services.danmaku_filter import DanmakuFilter


logger = logging.getLogger("CommentStore")


@dataclass
class ApiAuthConfig:
    app_id: str = ""
    app_secret: str = ""
    use_system_proxy: bool = True


@dataclass
class Options:
    """弹幕显示的配置数据"""
    font_size: float = 40.0
    transparency: int = 0x30
    reserved_space: float = 0.0   # 底部保留给字幕的高度比例
    speed: float = 1.0            # 全局滚动速度倍率
    no_overlap: bool = True

    # 网络设置
    use_system_proxy: bool = True

    @property
    def spacing(self) -> float:
        return self.font_size / 10

    def to_dict(self):
        return asdict(self)


class CommentStore:
    """
    当前媒体的弹幕序列，所有访问都经过同一把锁，每次操作只持锁一帧左右的时间。
    访问者: 刷新循环 (tick)、加载完成 (load)、来源过滤更新 (apply_filter_override)、
    切换媒体 (clear)、跳转/延迟调整 (reset)。
    """
    def __init__(self):
        self._lock = threading.Lock()
        self._track: DanmakuTrack | None = None

    def count(self) -> int | None:
        with self._lock:
            return len(self._track) if self._track is not None else None

    def load(self, track: DanmakuTrack, danmaku_filter: DanmakuFilter,
             is_cancelled: Callable[[], bool] | None = None) -> bool:
        """
        用新加载的序列替换当前数据。
        加载已被取消时丢弃结果并返回 False。
        """
        with self._lock:
            if is_cancelled is not None and is_cancelled():
                logger.debug("加载已被取消，丢弃结果。")
                return False
            if track.filter_revision != danmaku_filter.revision:
                # 标准化期间来源过滤发生了变化
                danmaku_filter.apply(track.comments)
                track.filter_revision = danmaku_filter.revision
            self._track = track
            return True

    def clear(self):
        with self._lock:
            self._track = None

    def reset(self) -> bool:
        """将所有弹幕的滚动状态重置为未调度"""
        with self._lock:
            if self._track is None:
                return False
            self._track.reset()
            return True

    def apply_filter_override(self, danmaku_filter: DanmakuFilter, sources: set[Source] | None):
        """切换实时来源屏蔽，重新计算 blocked 并重置所有滚动状态"""
        with self._lock:
            danmaku_filter.set_override(sources)
            if self._track is not None:
                danmaku_filter.apply(self._track.comments)
                self._track.filter_revision = danmaku_filter.revision
                self._track.reset()

    def tick(self, render: Callable[[DanmakuTrack], list[Placement]]) -> list[Placement] | None:
        """在锁内对当前序列执行一帧计算；没有数据时返回 None"""
        with self._lock:
            if self._track is None:
                return None
            return render(self._track)
