from mpv_danmaku.core.error_handler import describe_exception, normalize_exception
from mpv_danmaku.core.exceptions import AmbiguousMatchError, NetworkError, NoMatchError
from mpv_danmaku.core.models.errors import DanmakuErrorCode


def test_known_exceptions_map_to_their_codes():
    assert normalize_exception(NoMatchError("x")) is DanmakuErrorCode.NO_MATCH
    assert normalize_exception(NetworkError()) is DanmakuErrorCode.NETWORK_ERROR
    assert NoMatchError().code == DanmakuErrorCode.NO_MATCH.code


def test_unknown_exceptions():
    assert normalize_exception(RuntimeError("boom")) is DanmakuErrorCode.UNKNOWN_ERROR
    assert "boom" in describe_exception(RuntimeError("boom"))


def test_describe_prefers_message():
    assert describe_exception(AmbiguousMatchError("匹配到 2 个剧集")) == "匹配到 2 个剧集"
    assert describe_exception(NetworkError()) == DanmakuErrorCode.NETWORK_ERROR.description
