"""
搜索接口返回的结果行。

接口对不同类型的作品返回不同结构的行，这里按类型解码为三种显式的结构：
电视剧/动漫 (SeriesRow)、电影 (MovieRow)、综艺 (ShowRow)。
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import ResponseParseError


SERIES_CATEGORIES = ("2", "4")  # 电视剧, 动漫
MOVIE_CATEGORY = "1"
SHOW_CATEGORY = "3"


@dataclass(frozen=True)
class PlayLink:
    """播放链接。接口有时只返回链接字符串，此时 mark 为空。"""
    url: str
    mark: str = ""

    @classmethod
    def decode(cls, value: Any) -> PlayLink:
        if isinstance(value, str):
            return cls(url=value)
        if isinstance(value, dict) and isinstance(value.get('url'), str):
            return cls(url=value['url'], mark=str(value.get('mark') or ""))
        raise ResponseParseError(f"无法识别的播放链接: {value!r}")


@dataclass
class SeriesRow:
    """按集排列的播放链接"""
    title: str
    episodes: list[PlayLink] = field(default_factory=list)


@dataclass
class MovieRow:
    """站点名 -> 播放链接"""
    title: str
    links: dict[str, PlayLink] = field(default_factory=dict)


@dataclass
class ShowRow:
    """综艺节目，需按站点二次分页查询具体一期"""
    title: str
    ent_id: str
    totals: dict[str, int] = field(default_factory=dict)
    years: dict[str, list[str]] = field(default_factory=dict)


SearchRow = SeriesRow | MovieRow | ShowRow


def _decode_totals(raw: Any) -> dict[str, int]:
    totals = {}
    if not isinstance(raw, dict):
        return totals
    for site, value in raw.items():
        try:
            totals[site] = int(value)
        except (TypeError, ValueError):
            continue
    return totals

def decode_search_row(raw: dict) -> SearchRow | None:
    """
    将单行原始结果解码为对应的结构。
    未知类别返回 None；已知类别但字段类型不符时抛出 ResponseParseError。
    """
    if not isinstance(raw, dict):
        raise ResponseParseError(f"搜索结果行格式错误: {raw!r}")

    category = str(raw.get('cat_id', ''))
    title = str(raw.get('titleTxt') or raw.get('title') or "")

    if category in SERIES_CATEGORIES:
        items = raw.get('seriesPlaylinks') or []
        if not isinstance(items, list):
            raise ResponseParseError(f"'{title}' 的分集链接不是列表")
        return SeriesRow(title=title, episodes=[PlayLink.decode(item) for item in items])

    if category == MOVIE_CATEGORY:
        playlinks = raw.get('playlinks') or {}
        if not isinstance(playlinks, dict):
            raise ResponseParseError(f"'{title}' 的播放链接不是字典")
        links = {
            site: PlayLink.decode(value)
            for site, value in playlinks.items()
            if value
        }
        return MovieRow(title=title, links=links)

    if category == SHOW_CATEGORY:
        ent_id = raw.get('en_id') or raw.get('id')
        if not ent_id:
            raise ResponseParseError(f"综艺 '{title}' 缺失关键字段 'en_id'")
        years = {}
        raw_years = raw.get('years')
        if isinstance(raw_years, dict):
            years = {site: [str(y) for y in ys] for site, ys in raw_years.items() if isinstance(ys, list)}

        return ShowRow(
            title=title,
            ent_id=str(ent_id),
            totals=_decode_totals(raw.get('playlinks_total')),
            years=years
        )

    return None
