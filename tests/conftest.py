import random

import pytest

from mpv_danmaku.core.host import HostEvent
from mpv_danmaku.core.models.danmaku import Danmaku, DanmakuTrack, Source


class FixedRandom(random.Random):
    """random() 始终返回同一个值，便于验证速度取值边界"""
    def __init__(self, value: float = 0.5):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class FakeHost:
    """记录所有调用的播放器替身"""
    def __init__(self, config=None, properties=None, events=None):
        self.config = dict(config or {})
        self.properties = {
            "time-pos": 0.0,
            "speed": 1.0,
            "osd-width": 1920.0,
            "osd-height": 1080.0,
            "pause": False,
        }
        self.properties.update(properties or {})
        self.events = list(events or [])
        self.messages = []
        self.overlays = []
        self.cleared = 0
        self.timeouts = []

    def read_numeric_property(self, name):
        value = self.properties.get(name)
        return float(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else None

    def read_string_property(self, name):
        value = self.properties.get(name)
        return None if value is None else str(value)

    def read_boolean_property(self, name):
        value = self.properties.get(name)
        return value if isinstance(value, bool) else None

    def push_overlay(self, text, width, height):
        self.overlays.append((text, width, height))

    def clear_overlay(self):
        self.cleared += 1

    def show_message(self, text):
        self.messages.append(text)

    def read_config(self):
        return self.config

    def wait_event(self, timeout):
        self.timeouts.append(timeout)
        if not self.events:
            raise AssertionError("事件队列已空")
        event = self.events.pop(0)
        return event if isinstance(event, HostEvent) else None


def make_comment(time=0.0, text="弹幕", source=Source.DANDAN, **kwargs) -> Danmaku:
    return Danmaku(
        time=time,
        text=text,
        visible_width=kwargs.pop("visible_width", len(text)),
        color=kwargs.pop("color", (255, 255, 255)),
        source=source,
        **kwargs
    )


def make_track(*comments) -> DanmakuTrack:
    return DanmakuTrack(comments=list(comments))


@pytest.fixture
def fake_host():
    return FakeHost()
