"""
弹幕轨道调度。

每帧从零重建轨道表：按时间顺序遍历已到时的弹幕，已调度的弹幕以当前位置参与折叠，
新弹幕在第一条可用轨道上选取一个不会追上前车的速度。
"""
import logging
import random

from .models.danmaku import (
    SKIPPED, Danmaku, DanmakuTrack, Scheduled, ScrollState, Skipped, Unscheduled
)
from .models.structs import Lane, Placement
from .state import Options

from ..config.app_config import Playback
from ..utils.time_utils import format_timestamp


logger = logging.getLogger("LaneScheduler")


def fit_viewport(osd_width: float, osd_height: float) -> tuple[float, float]:
    """在 1920x1080 的坐标系内按播放器的宽高比收缩超出 16:9 的一边"""
    width = Playback.BASE_WIDTH
    height = Playback.BASE_HEIGHT
    if osd_width <= 0 or osd_height <= 0:
        return width, height

    ratio = osd_width / osd_height
    if ratio > width / height:
        height = width / ratio
    elif ratio < width / height:
        width = height * ratio
    return width, height

def format_ass_event(placement: Placement, transparency: int) -> str:
    """生成单条弹幕的 ASS 事件文本"""
    r, g, b = placement.color
    return (
        f"{{\\pos({placement.x:.2f},{placement.y:.2f})"
        f"\\c&H{b:02X}{g:02X}{r:02X}&\\alpha&H{transparency:02X}"
        f"\\fs{placement.font_size:g}\\bord1.5\\shad0\\b1\\q2}}"
        f"{placement.message}"
    )

def render_overlay(placements: list[Placement], transparency: int) -> str:
    return "\n".join(format_ass_event(p, transparency) for p in placements)


class LaneScheduler:
    """
    弹幕轨道调度器
    step 为每帧（INTERVAL）移动的屏宽比例；最低速度 MIN_STEP 对应 DURATION 秒横穿屏幕。
    """
    def __init__(self, options: Options, rng: random.Random | None = None):
        self.options = options
        self.rng = rng or random.Random()

    @property
    def min_step(self) -> float:
        return Playback.INTERVAL * self.options.speed / Playback.DURATION

    @property
    def max_step(self) -> float:
        return Playback.MAX_SPEEDUP * self.min_step

    def lane_count(self, height: float) -> int:
        row_height = self.options.font_size + self.options.spacing
        return max(1, int(height * (1 - self.options.reserved_space) / row_height))

    def new_lanes(self, height: float) -> list[Lane]:
        return [Lane(end=0.0, step=self.min_step) for _ in range(self.lane_count(height))]

    def is_admissible(self, lane: Lane, ticks: float, width: float) -> bool:
        """以最低速度计，轨道上的占用者是否已经让出新弹幕的起始位置"""
        return lane.end < width - width * ticks * self.min_step

    def ceiling(self, lane: Lane, ticks: float, width: float) -> float:
        """
        新弹幕在该轨道上的速度上限。
        恰好在前车尾部离开屏幕左缘时追上它的速度，低于此速度则永不相撞。
        """
        if lane.is_virgin:
            return self.max_step
        denominator = ticks + lane.end / (width * lane.step)
        if denominator <= 0:
            return self.max_step
        return min(self.max_step, 1 / denominator)

    def draw_step(self, ceiling: float) -> float:
        """在 [MIN_STEP, ceiling) 内均匀取值，调用方保证 ceiling > MIN_STEP"""
        return self.min_step + (ceiling - self.min_step) * self.rng.random()

    def transition(self, lanes: list[Lane], ticks: float, width: float) -> ScrollState:
        """
        为一条未调度的弹幕选择轨道与速度，返回新的滚动状态。
        ticks 为弹幕到时后经过的帧数。
        """
        for index, lane in enumerate(lanes):
            if not self.is_admissible(lane, ticks, width):
                continue
            ceiling = self.ceiling(lane, ticks, width)
            if ceiling <= self.min_step:
                # 以最低速度也会追上前车
                continue
            step = self.draw_step(ceiling)
            return Scheduled(x=width - width * ticks * step, lane=index, step=step)

        if self.options.no_overlap:
            return SKIPPED

        index = min(range(len(lanes)), key=lambda i: lanes[i].end)
        return Scheduled(x=width - width * ticks * self.min_step, lane=index, step=self.min_step)

    def tick(self, track: DanmakuTrack, pos: float, speed: float, delay: float,
             width: float, height: float) -> list[Placement]:
        """
        计算当前帧所有可见弹幕的位置，并推进它们的滚动状态。

        Args:
            track: 当前弹幕序列
            pos: 播放位置（秒）
            speed: 播放速度
            delay: 弹幕延迟（秒）
            width, height: 已按 16:9 适配的画布尺寸
        """
        font_size = self.options.font_size
        spacing = self.options.spacing
        row_height = font_size + spacing
        lanes = self.new_lanes(height)
        placements = []

        comments = track.comments
        inert_prefix = True
        for index in range(track.first_live, len(comments)):
            comment = comments[index]
            due = comment.time + delay
            if due > pos:
                break

            inert = self._advance(comment, lanes, placements, pos - due, speed, width, row_height)

            # 已跳过 / 已屏蔽 / 已离开屏幕的弹幕在下次重置前不会再变化
            if inert_prefix and inert:
                track.first_live = index + 1
            else:
                inert_prefix = False

        return placements

    def _advance(self, comment: Danmaku, lanes: list[Lane], placements: list[Placement],
                 elapsed: float, speed: float, width: float, row_height: float) -> bool:
        """处理单条已到时的弹幕，返回它是否已不再参与后续计算"""
        if comment.blocked:
            return True

        state = comment.scroll_state
        if isinstance(state, Skipped):
            return True

        if isinstance(state, Unscheduled):
            state = self.transition(lanes, elapsed / Playback.INTERVAL, width)
            comment.scroll_state = state
            if isinstance(state, Skipped):
                logger.debug(f"弹幕 [{format_timestamp(comment.time)}] 没有可用轨道，已跳过: {comment.text}")
                return True

        extent = comment.visible_width * self.options.font_size + self.options.spacing
        if state.x + extent <= 0:
            return True

        placements.append(Placement(
            x=state.x,
            y=state.lane * row_height,
            color=comment.color,
            message=comment.text,
            font_size=self.options.font_size
        ))

        new_x = state.x - width * state.step * speed
        comment.scroll_state = Scheduled(x=new_x, lane=state.lane, step=state.step)

        # 画布缩小后旧轨道可能已不存在
        if state.lane < len(lanes):
            lane = lanes[state.lane]
            new_end = new_x + extent
            if new_end / state.step > lane.end / lane.step:
                lane.end = new_end
                lane.step = state.step
        return False
