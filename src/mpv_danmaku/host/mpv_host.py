"""
基于 python-mpv 的播放器服务实现。

python-mpv 在自己的事件线程中调用回调，这里把回调统一转换为 HostEvent 放入队列，
由弹幕总控在主线程中按顺序处理。
"""
import logging
import os
import queue

import mpv

from ..config.app_config import AppInfo
from ..core.host import EventKind, HostEvent
from ..utils.config_manager import read_config_file
from ..utils.log_utils import forward_mpv_log


logger = logging.getLogger("MpvHost")

CLIENT_MESSAGES = ("toggle-danmaku", "danmaku-delay", "danmaku-speed", "danmaku-filter-source")
TOGGLE_KEY = "ctrl+d"


class MpvHost:
    def __init__(self, player: mpv.MPV):
        self.player = player
        self._events: queue.Queue[HostEvent] = queue.Queue()
        self._register_callbacks()

    @classmethod
    def create(cls, **player_options) -> 'MpvHost':
        player = mpv.MPV(
            log_handler=forward_mpv_log,
            loglevel='warn',
            input_default_bindings=True,
            input_vo_keyboard=True,
            osc=True,
            **player_options
        )
        return cls(player)

    def _register_callbacks(self):
        player = self.player

        @player.event_callback('file-loaded')
        def _on_file_loaded(event):
            self.post(EventKind.FILE_LOADED)

        @player.event_callback('seek')
        def _on_seek(event):
            self.post(EventKind.SEEK)

        @player.event_callback('shutdown')
        def _on_shutdown(event):
            self.post(EventKind.SHUTDOWN)

        @player.property_observer('pause')
        def _on_pause(name, value):
            self.post(EventKind.PROPERTY_CHANGE, name, str(value))

        for name in CLIENT_MESSAGES:
            player.register_message_handler(name, self._message_handler(name))

        @player.on_key_press(TOGGLE_KEY)
        def _on_toggle_key():
            self.post(EventKind.CLIENT_MESSAGE, "toggle-danmaku")

    def _message_handler(self, name: str):
        def handler(*args):
            self.post(EventKind.CLIENT_MESSAGE, name, *args)
        return handler

    def post(self, kind: EventKind, *args: str):
        self._events.put(HostEvent(kind, tuple(args)))

    # === HostServices ===

    def _read_property(self, name: str):
        try:
            return getattr(self.player, name.replace('-', '_'))
        except (AttributeError, RuntimeError) as e:
            logger.debug(f"属性 {name} 不可用: {e}")
            return None

    def read_numeric_property(self, name: str) -> float | None:
        value = self._read_property(name)
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def read_string_property(self, name: str) -> str | None:
        value = self._read_property(name)
        return None if value is None else str(value)

    def read_boolean_property(self, name: str) -> bool | None:
        value = self._read_property(name)
        return value if isinstance(value, bool) else None

    def push_overlay(self, text: str, width: int, height: int):
        self.player.command('osd-overlay', 0, 'ass-events', text, width, height)

    def clear_overlay(self):
        self.player.command('osd-overlay', 0, 'none', '')

    def show_message(self, text: str):
        self.player.command('show-text', text)

    def read_config(self) -> dict[str, str]:
        """读取 mpv 配置目录下的 script-opts/<客户端名>.conf"""
        path = self.player.expand_path(f"~~/script-opts/{AppInfo.CLIENT_NAME}.conf")
        config = read_config_file(path)

        # 屏蔽规则文件路径同样支持 mpv 的路径前缀
        rules_path = config.get("filter_bilibili")
        if rules_path:
            config["filter_bilibili"] = os.path.expanduser(self.player.expand_path(rules_path))
        return config

    def wait_event(self, timeout: float | None) -> HostEvent | None:
        try:
            return self._events.get(timeout=timeout)
        except queue.Empty:
            return None

    # === 播放控制 ===

    def play(self, media: str):
        self.player.play(media)

    def terminate(self):
        self.player.terminate()
