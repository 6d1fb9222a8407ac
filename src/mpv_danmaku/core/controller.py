import logging
import random
from pathlib import Path
from typing import Callable

from .error_handler import describe_exception, normalize_exception
from .exceptions import ArgumentError
from .host import EventKind, HostEvent, HostServices
from .models.danmaku import DanmakuTrack
from .models.errors import DanmakuErrorCode
from .scheduler import LaneScheduler, fit_viewport, render_overlay
from .services.danmaku_filter import parse_sources
from .state import CommentStore
from .workers import CancelToken, FetchWorker

from ..config.app_config import Playback
from ..utils.config_manager import load_options
from ..utils.time_utils import format_delay


class DanmakuController:
    """
    弹幕总控。
    持有开关状态、延迟、共享弹幕序列与播放器服务，驱动每帧的轨道调度。
    """
    def __init__(self, host: HostServices,
                 loader: Callable[[str, CancelToken], DanmakuTrack] | None = None,
                 rng: random.Random | None = None):
        self.host = host
        self.logger = logging.getLogger("DanmakuController")

        self.options, self.danmaku_filter = load_options(host.read_config(), report=self._report_error)
        self.scheduler = LaneScheduler(self.options, rng)
        self.store = CommentStore()
        self.loader = loader or self._create_default_loader()

        self.enabled = False
        self.delay = 0.0
        # 最近启动的加载任务；取消后仍保留引用，供下一个任务等待其结束
        self._worker: FetchWorker | None = None

    def _create_default_loader(self) -> Callable[[str, CancelToken], DanmakuTrack]:
        from .services.loader import DanmakuLoader
        from ..utils.credential_manager import load_auth_config

        auth_config = load_auth_config(self.options.use_system_proxy)
        return DanmakuLoader(auth_config, self.danmaku_filter)

    # === 控制接口 ===

    def enable(self):
        self.enabled = True
        count = self.store.count()
        if count is not None:
            self.store.reset()
            self._show_loaded(count)
        else:
            self.host.show_message("弹幕: 开启")
            self._start_fetch()

    def disable(self):
        self.enabled = False
        self.host.clear_overlay()
        self.host.show_message("弹幕: 关闭")

    def toggle(self):
        if self.enabled:
            self.disable()
        else:
            self.enable()

    def on_media_loaded(self, path_or_title: str | None = None):
        """切换媒体: 取消进行中的加载，丢弃旧弹幕并重置延迟"""
        self._cancel_fetch()
        self.store.clear()
        self.delay = 0.0
        if self.enabled:
            self.host.clear_overlay()
            self._start_fetch(path_or_title)

    def on_seek(self):
        if self.enabled:
            self.store.reset()

    def on_delay_adjust(self, seconds: str | float | None):
        try:
            value = self._parse_number(seconds, "danmaku-delay", "seconds")
        except ArgumentError as e:
            self._report_error(e)
            return

        self.delay += value
        self.store.reset()
        self.host.show_message(f"弹幕延迟: {format_delay(self.delay)}")

    def on_speed_adjust(self, factor: str | float | None):
        try:
            value = self._parse_number(factor, "danmaku-speed", "factor")
            if value <= 0:
                raise ArgumentError(f"command danmaku-speed: 速度必须大于 0 ({value})")
        except ArgumentError as e:
            self._report_error(e)
            return

        self.options.speed = value
        self.store.reset()
        self.host.show_message(f"弹幕速度: {value:g}x")

    def on_filter_source_override(self, csv: str | None):
        """设置实时来源屏蔽；空值恢复为配置文件中的静态规则"""
        sources = parse_sources(csv) if csv and csv.strip() else None
        self.store.apply_filter_override(self.danmaku_filter, sources)

        if sources is None:
            self.host.show_message("弹幕来源屏蔽: 使用默认设置")
        else:
            names = ", ".join(sorted(s.value for s in sources)) or "无"
            self.host.show_message(f"弹幕来源屏蔽: {names}")

    def tick(self, pos: float, speed: float, osd_width: float, osd_height: float) -> str | None:
        """计算一帧的覆盖层文本；没有弹幕数据时返回 None"""
        width, height = fit_viewport(osd_width, osd_height)
        placements = self.store.tick(
            lambda track: self.scheduler.tick(track, pos, speed, self.delay, width, height)
        )
        if placements is None:
            return None
        return render_overlay(placements, self.options.transparency)

    # === 事件循环 ===

    def run(self):
        """
        主循环: 启用且正在播放时以 INTERVAL 为超时等待事件，实现定时刷新；
        否则无限等待下一个事件。
        """
        while True:
            paused = self.host.read_boolean_property("pause")
            timeout = Playback.INTERVAL if self.enabled and paused is False else None

            event = self.host.wait_event(timeout)
            if event is not None:
                if event.kind is EventKind.SHUTDOWN:
                    self._cancel_fetch()
                    self.logger.info("播放器已退出。")
                    return
                self.handle_event(event)

            if self.enabled:
                self.render()

    def handle_event(self, event: HostEvent):
        if event.kind is EventKind.FILE_LOADED:
            self.on_media_loaded()
        elif event.kind is EventKind.SEEK:
            self.on_seek()
        elif event.kind is EventKind.CLIENT_MESSAGE and event.args:
            self._handle_message(event.args[0], event.args[1:])

    def _handle_message(self, name: str, args: tuple[str, ...]):
        first_arg = args[0] if args else None
        if name == "toggle-danmaku":
            self.toggle()
        elif name == "danmaku-delay":
            self.on_delay_adjust(first_arg)
        elif name == "danmaku-speed":
            self.on_speed_adjust(first_arg)
        elif name == "danmaku-filter-source":
            self.on_filter_source_override(first_arg)

    def render(self):
        """读取播放状态并推送一帧覆盖层"""
        osd_width = self.host.read_numeric_property("osd-width")
        osd_height = self.host.read_numeric_property("osd-height")
        pos = self.host.read_numeric_property("time-pos")
        speed = self.host.read_numeric_property("speed")
        if None in (osd_width, osd_height, pos, speed):
            return

        text = self.tick(pos, speed, osd_width, osd_height)
        if text is None:
            return
        if text:
            width, height = fit_viewport(osd_width, osd_height)
            self.host.push_overlay(text, int(width), int(height))
        else:
            self.host.clear_overlay()

    # === 后台加载 ===

    def _current_media(self) -> str | None:
        """本地文件返回路径，其余返回媒体标题用于搜索"""
        path = self.host.read_string_property("path")
        if path and Path(path).is_file():
            return path
        return self.host.read_string_property("media-title") or path

    def _start_fetch(self, media: str | None = None):
        self._cancel_fetch()
        media = media or self._current_media()
        if not media:
            self.logger.info("当前没有正在播放的媒体，等待文件加载。")
            return

        self._worker = FetchWorker(
            media, self.loader, self._on_fetch_success, self._on_fetch_error, previous=self._worker
        )
        self._worker.start()

    def _cancel_fetch(self):
        if self._worker is not None:
            self._worker.cancel()

    def wait_fetch(self, timeout: float | None = None) -> bool:
        """等待最近的加载任务（及其之前的任务）结束，返回是否已结束"""
        worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    def _on_fetch_success(self, worker: FetchWorker, track: DanmakuTrack):
        if not self.store.load(track, self.danmaku_filter, worker.is_cancelled):
            return
        self.logger.info(f"弹幕加载完成: {worker.media} ({len(track)} 条)")
        if self.enabled:
            if self.host.read_boolean_property("pause"):
                self.render()
            self._show_loaded(len(track))

    def _on_fetch_error(self, worker: FetchWorker, error: Exception):
        if worker.is_cancelled():
            return
        self._report_error(error)

    # === 提示 ===

    def _show_loaded(self, count: int):
        self.host.show_message(f"已加载 {count} 条弹幕")

    def _report_error(self, error: Exception):
        """每个错误只上报一次: 一条日志 + 一条 OSD 提示"""
        error_code = normalize_exception(error)
        if error_code is DanmakuErrorCode.UNKNOWN_ERROR:
            self.logger.error(f"发生未知错误: {error}", exc_info=error)
        else:
            self.logger.error(f"[{error_code.name}] {error}")
        self.host.show_message(f"弹幕: {describe_exception(error)}")

    @staticmethod
    def _parse_number(value: str | float | None, command: str, argument: str) -> float:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ArgumentError(f"command {command}: required argument {argument} not set")
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ArgumentError(f"command {command}: invalid {argument} '{value}'") from e
