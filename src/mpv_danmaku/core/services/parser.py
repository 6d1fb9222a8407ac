import logging

import regex

from ..models.danmaku import Danmaku, DanmakuTrack, Source
from ..models.structs import RawComment
from .danmaku_filter import DanmakuFilter


BLACK = (0, 0, 0)
GRAPHEME_PATTERN = regex.compile(r"\X")


def parse_color(value: str | int) -> tuple[int, int, int]:
    """
    解析弹幕颜色。
    支持十进制打包整数 (r*65536 + g*256 + b) 与 "#RRGGBB" 形式的十六进制字符串，
    无法解析时返回黑色。
    """
    if isinstance(value, int):
        packed = value
    else:
        text = str(value).strip()
        if text.isdecimal():
            packed = int(text)
        else:
            if text[:2].lower() == '0x':
                text = text[2:]
            elif text and text[0] in '#$&':
                text = text[1:]
            if len(text) != 6:
                return BLACK
            try:
                packed = int(text, 16)
            except ValueError:
                return BLACK

    if not 0 <= packed <= 0xFFFFFF:
        return BLACK
    return packed // 65536, packed // 256 % 256, packed % 256

def count_graphemes(text: str) -> int:
    """统计用户可感知的字符数（字素簇），emoji 与组合字符均计为 1"""
    return len(GRAPHEME_PATTERN.findall(text))

def escape_message(message: str) -> str:
    """将换行替换为 ASS 的 \\N，保证覆盖层每条事件只占一行"""
    return message.replace('\r\n', '\n').replace('\n', '\\N')


class DanmakuParser:
    """
    将接口返回的原始弹幕转换为标准 Danmaku 序列。
    唯一的弹幕标准化入口，确保过滤和排序逻辑的一致性。
    """
    def __init__(self, danmaku_filter: DanmakuFilter):
        self.danmaku_filter = danmaku_filter
        self.logger = logging.getLogger("DanmakuParser")

    def to_danmaku(self, raw: RawComment) -> Danmaku:
        source = Source.from_user(raw.user)
        return Danmaku(
            time=raw.time,
            text=escape_message(raw.message),
            visible_width=count_graphemes(raw.message),
            color=parse_color(raw.color),
            source=source,
            blocked=self.danmaku_filter.is_blocked(source)
        )

    def normalize(self, raw_comments: list[RawComment]) -> DanmakuTrack:
        """过滤关键词、转换并按时间排序"""
        revision = self.danmaku_filter.revision
        kept = [raw for raw in raw_comments if not self.danmaku_filter.excludes(raw.message)]
        dropped = len(raw_comments) - len(kept)
        if dropped:
            self.logger.info(f"关键词过滤剔除 {dropped} 条弹幕。")

        comments = [self.to_danmaku(raw) for raw in kept]
        comments.sort(key=lambda c: c.time)

        blocked = sum(1 for c in comments if c.blocked)
        self.logger.info(f"标准化完成: {len(comments)} 条弹幕，其中 {blocked} 条来源被屏蔽。")
        return DanmakuTrack(comments=comments, filter_revision=revision)
