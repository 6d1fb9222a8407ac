from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol


class EventKind(Enum):
    SHUTDOWN = auto()
    FILE_LOADED = auto()
    SEEK = auto()
    CLIENT_MESSAGE = auto()
    PROPERTY_CHANGE = auto()


@dataclass(frozen=True)
class HostEvent:
    kind: EventKind
    args: tuple[str, ...] = field(default_factory=tuple)


class HostServices(Protocol):
    """播放器一侧提供给弹幕核心的服务"""

    def read_numeric_property(self, name: str) -> float | None: ...

    def read_string_property(self, name: str) -> str | None: ...

    def read_boolean_property(self, name: str) -> bool | None: ...

    def push_overlay(self, text: str, width: int, height: int) -> None: ...

    def clear_overlay(self) -> None: ...

    def show_message(self, text: str) -> None: ...

    def read_config(self) -> dict[str, str]: ...

    def wait_event(self, timeout: float | None) -> HostEvent | None:
        """等待下一个事件；timeout 为 None 时无限等待，超时返回 None"""
        ...
