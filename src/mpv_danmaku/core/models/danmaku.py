from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class Source(Enum):
    """弹幕来源站点"""
    BILIBILI = "bilibili"
    GAMER = "gamer"
    ACFUN = "acfun"
    TENCENT = "qq"
    IQIYI = "iqiyi"
    D = "d"
    DANDAN = "dandan"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: str) -> Source:
        """按站点名（不区分大小写）查找来源，未知名称返回 UNKNOWN"""
        try:
            source = cls(name.strip().lower())
        except ValueError:
            return cls.UNKNOWN
        return source

    @classmethod
    def from_user(cls, user: str) -> Source:
        """
        根据用户标识推断弹幕来源。
        纯数字（含空串）为弹弹Play本站用户；形如 "[BiliBili]xxx" 的取方括号内的站点名。
        """
        if not user or user.isdecimal():
            return cls.DANDAN
        if user.startswith('['):
            name, sep, _ = user[1:].partition(']')
            if sep:
                return cls.from_name(name)
        return cls.UNKNOWN


# === 滚动状态 (tagged union) ===

@dataclass(frozen=True)
class Unscheduled:
    """尚未分配轨道"""


@dataclass(frozen=True)
class Scheduled:
    """已分配轨道：当前横坐标、轨道序号、每帧位移（屏宽比例）"""
    x: float
    lane: int
    step: float


@dataclass(frozen=True)
class Skipped:
    """无可用轨道且不允许重叠，直到下次重置前不再显示"""


ScrollState = Unscheduled | Scheduled | Skipped

UNSCHEDULED = Unscheduled()
SKIPPED = Skipped()


@dataclass
class Danmaku:
    """弹幕实体对象"""
    time: float                 # 视频时间轴偏移（秒）
    text: str                   # 已转义换行的显示文本
    visible_width: int          # 字素簇数量
    color: tuple[int, int, int]
    source: Source = Source.UNKNOWN
    blocked: bool = False
    scroll_state: ScrollState = UNSCHEDULED

    @property
    def r(self) -> int:
        return self.color[0]

    @property
    def g(self) -> int:
        return self.color[1]

    @property
    def b(self) -> int:
        return self.color[2]

    def reset(self):
        self.scroll_state = UNSCHEDULED


@dataclass
class DanmakuTrack:
    """
    一次加载得到的弹幕序列（按时间升序，只排序一次）。
    first_live 之前的弹幕在下次重置前不会再参与轨道计算。
    """
    comments: list[Danmaku] = field(default_factory=list)
    first_live: int = 0
    filter_revision: int = 0

    def __len__(self) -> int:
        return len(self.comments)

    def reset(self):
        for comment in self.comments:
            comment.reset()
        self.first_live = 0
