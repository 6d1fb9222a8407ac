import json

from mpv_danmaku.core.exceptions import ConfigParseError
from mpv_danmaku.core.models.danmaku import Source
from mpv_danmaku.utils.config_manager import load_bilibili_rules, load_options, read_config_file


def test_read_config_file(tmp_path):
    path = tmp_path / "danmaku.conf"
    path.write_text("# 注释\nfont_size=50\n\nfilter = 剧透,前方\nbroken line\n", encoding="utf-8")

    assert read_config_file(path) == {"font_size": "50", "filter": "剧透,前方"}


def test_read_missing_config_file(tmp_path):
    assert read_config_file(tmp_path / "missing.conf") == {}


def test_defaults():
    options, danmaku_filter = load_options({})

    assert options.font_size == 40.0
    assert options.transparency == 0x30
    assert options.reserved_space == 0.0
    assert options.speed == 1.0
    assert options.no_overlap is True
    assert options.spacing == 4.0
    assert danmaku_filter.keywords == []
    assert danmaku_filter.sources == set()


def test_valid_options_are_applied():
    options, danmaku_filter = load_options({
        "font_size": "30",
        "transparency": "255",
        "reserved_space": "0.25",
        "speed": "1.5",
        "no_overlap": "no",
        "use_system_proxy": "no",
        "filter": "a,,b",
        "filter_source": "bilibili,gamer",
    })

    assert options.font_size == 30.0
    assert options.transparency == 255
    assert options.reserved_space == 0.25
    assert options.speed == 1.5
    assert options.no_overlap is False
    assert options.use_system_proxy is False
    assert danmaku_filter.keywords == ["a", "b"]
    assert danmaku_filter.sources == {Source.BILIBILI, Source.GAMER}


def test_invalid_options_keep_defaults():
    options, _ = load_options({
        "font_size": "-3",
        "transparency": "300",
        "reserved_space": "1",
        "speed": "fast",
        "no_overlap": "maybe",
    })

    assert options.font_size == 40.0
    assert options.transparency == 0x30
    assert options.reserved_space == 0.0
    assert options.speed == 1.0
    assert options.no_overlap is True


def test_bilibili_rules(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps([
        {"type": 0, "filter": "剧透", "opened": True},
        {"type": 0, "filter": "关闭的", "opened": False},
        {"type": 1, "filter": "^正则$", "opened": True},
    ]), encoding="utf-8")

    assert load_bilibili_rules(path) == ["剧透"]

    _, danmaku_filter = load_options({"filter": "x", "filter_bilibili": str(path)})
    assert danmaku_filter.keywords == ["x", "剧透"]


def test_broken_bilibili_rules_are_reported_once(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text("{not json", encoding="utf-8")
    reported = []

    options, danmaku_filter = load_options({"filter_bilibili": str(path), "font_size": "20"}, report=reported.append)

    assert len(reported) == 1
    assert isinstance(reported[0], ConfigParseError)
    assert danmaku_filter.keywords == []
    assert options.font_size == 20.0
