import logging
from dataclasses import dataclass, field

from ..models.danmaku import Danmaku, Source


logger = logging.getLogger("DanmakuFilter")


def parse_sources(csv: str) -> set[Source]:
    """解析逗号分隔的来源名，忽略无法识别的名称"""
    sources = set()
    for name in (csv or "").split(','):
        if not name.strip():
            continue
        source = Source.from_name(name)
        if source is Source.UNKNOWN:
            logger.warning(f"忽略无法识别的弹幕来源: '{name.strip()}'")
            continue
        sources.add(source)
    return sources


@dataclass
class DanmakuFilter:
    """
    弹幕过滤规则。
    keywords 在加载时永久剔除弹幕；sources / sources_rt 只决定 blocked 标记，可随时切换。
    """
    keywords: list[str] = field(default_factory=list)
    sources: set[Source] = field(default_factory=set)
    sources_rt: set[Source] | None = None
    # 每次修改 sources_rt 时递增，用于发现加载期间发生的过滤变更
    revision: int = 0

    @property
    def active_sources(self) -> set[Source]:
        return self.sources_rt if self.sources_rt is not None else self.sources

    def excludes(self, message: str) -> bool:
        """消息包含任一关键词时返回 True"""
        return any(keyword in message for keyword in self.keywords if keyword)

    def is_blocked(self, source: Source) -> bool:
        return source in self.active_sources

    def set_override(self, sources: set[Source] | None):
        """设置 (或用 None 清除) 实时来源屏蔽"""
        self.sources_rt = sources
        self.revision += 1

    def apply(self, comments: list[Danmaku]):
        """按当前来源规则重新计算 blocked"""
        active = self.active_sources
        for comment in comments:
            comment.blocked = comment.source in active
