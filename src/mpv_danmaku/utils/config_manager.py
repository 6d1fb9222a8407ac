import json
import logging
import os
from pathlib import Path
from typing import Callable, Mapping

from ..core.exceptions import ConfigParseError
from ..core.services.danmaku_filter import DanmakuFilter, parse_sources
from ..core.state import Options


logger = logging.getLogger("ConfigManager")


def read_config_file(path: str | Path) -> dict[str, str]:
    """
    读取 script-opts 形式的配置文件 (每行 key=value，# 开头为注释)。
    文件不存在时返回空配置。
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"未找到配置文件 {path}，使用默认设置。")
        return {}

    config = {}
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            key, sep, value = line.partition('=')
            if sep:
                config[key.strip()] = value.strip()
    logger.info(f"配置已加载: {path}")
    return config

def load_bilibili_rules(path: str | Path) -> list[str]:
    """
    读取B站屏蔽设置导出的 JSON 规则，返回已启用的文本规则 (type == 0)。

    Raises:
        ConfigParseError 当文件无法读取或格式不符时
    """
    try:
        with open(os.path.expanduser(str(path)), 'r', encoding='utf-8') as f:
            rules = json.load(f)
        return [
            str(rule['filter'])
            for rule in rules
            if rule['type'] == 0 and rule['opened']
        ]
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise ConfigParseError(f"屏蔽规则文件 '{path}' 格式错误: {e}") from e

def _parse_float(value: str, predicate: Callable[[float], bool]) -> float | None:
    try:
        number = float(value)
    except ValueError:
        return None
    return number if predicate(number) else None

def load_options(config: Mapping[str, str],
                 report: Callable[[Exception], None] | None = None) -> tuple[Options, DanmakuFilter]:
    """
    将配置字典转换为显示选项和过滤规则。
    无效的取值保留默认值；屏蔽规则文件错误通过 report 回调上报，不影响其余配置。
    """
    options = Options()
    danmaku_filter = DanmakuFilter()

    for key, value in config.items():
        if key == "font_size":
            font_size = _parse_float(value, lambda f: f > 0)
            if font_size is not None:
                options.font_size = font_size
        elif key == "transparency":
            try:
                transparency = int(value)
            except ValueError:
                transparency = -1
            if 0 <= transparency <= 255:
                options.transparency = transparency
        elif key == "reserved_space":
            reserved_space = _parse_float(value, lambda r: 0 <= r < 1)
            if reserved_space is not None:
                options.reserved_space = reserved_space
        elif key == "speed":
            speed = _parse_float(value, lambda s: s > 0)
            if speed is not None:
                options.speed = speed
        elif key == "no_overlap":
            if value in ("yes", "no"):
                options.no_overlap = value == "yes"
        elif key == "use_system_proxy":
            if value in ("yes", "no"):
                options.use_system_proxy = value == "yes"
        elif key == "filter" and value:
            danmaku_filter.keywords.extend(k for k in value.split(',') if k)
        elif key == "filter_source" and value:
            danmaku_filter.sources.update(parse_sources(value))
        elif key == "filter_bilibili" and value:
            try:
                danmaku_filter.keywords.extend(load_bilibili_rules(value))
            except ConfigParseError as e:
                if report:
                    report(e)
                else:
                    logger.error(f"option filter_bilibili: {e.message}")
        elif key not in ("filter", "filter_source", "filter_bilibili"):
            logger.debug(f"忽略未知配置项: {key}")

    logger.debug(f"显示选项: {options.to_dict()}")
    return options, danmaku_filter
