import hashlib
import logging
import re
from pathlib import Path
from typing import Callable

from ..exceptions import (
    AmbiguousMatchError, EpisodeOutOfRangeError, FetchCancelledError, NoLinksAvailableError,
    NoMatchError, ResponseParseError, VipSiteNotFoundError
)
from ..models.search import MovieRow, PlayLink, SearchRow, SeriesRow, ShowRow, decode_search_row
from ..models.structs import EpisodeTarget, PlayUrlTarget, TitleQuery

from ...api.dandan_api_client import DandanApiClient
from ...api.search_api_client import SearchApiClient
from ...config.app_config import PROVIDER_PRIORITY, Playback
from ...utils.string_utils import parse_title_query


CHINESE_NUMERALS = "零一二三四五六七八九十"


def compute_file_hash(path: str | Path, limit: int = Playback.FINGERPRINT_BYTES,
                      is_cancelled: Callable[[], bool] | None = None) -> str:
    """
    计算文件前 16 MiB 的 MD5，与弹弹Play的文件识别规则一致。
    每读取一块检查一次 is_cancelled，被取消时抛出 FetchCancelledError。
    """
    hasher = hashlib.md5()
    remaining = limit
    with open(path, 'rb') as f:
        while remaining > 0:
            chunk = f.read(min(1024 * 1024, remaining))
            if not chunk:
                break
            if is_cancelled is not None and is_cancelled():
                raise FetchCancelledError(f"已取消计算 '{Path(path).name}' 的指纹")
            hasher.update(chunk)
            remaining -= len(chunk)
    return hasher.hexdigest()

def has_season_marker(title: str, season: int) -> bool:
    """标题中是否标注了指定的季数，如 "第二季" / "第2季" / "Season 2" / "S2" """
    markers = [f"第{season}季"]
    if 0 < season <= 10:
        markers.append(f"第{CHINESE_NUMERALS[season]}季")
    if any(marker in title for marker in markers):
        return True
    return re.search(rf"(?:\bSeason\s*|\bS)0*{season}\b", title, re.IGNORECASE) is not None


class FingerprintMatcher:
    """按本地文件内容指纹匹配弹弹Play剧集"""
    def __init__(self, api_client: DandanApiClient, is_cancelled: Callable[[], bool] | None = None):
        self.client = api_client
        self.is_cancelled = is_cancelled
        self.logger = logging.getLogger("FingerprintMatcher")

    def match(self, path: str | Path) -> EpisodeTarget:
        """
        Raises:
            AmbiguousMatchError 匹配到多个剧集时（不做猜测）
            NoMatchError 没有匹配结果时
        """
        path = Path(path)
        file_hash = compute_file_hash(path, is_cancelled=self.is_cancelled)
        if self.is_cancelled is not None and self.is_cancelled():
            raise FetchCancelledError(f"已取消匹配 '{path.name}'")
        data = self.client.match(path.name, file_hash, path.stat().st_size)

        matches = data.get('matches') or []
        if not isinstance(matches, list):
            raise ResponseParseError("匹配结果 'matches' 不是列表")

        if len(matches) > 1:
            self.logger.debug(f"'{path.name}' 匹配到 {len(matches)} 个剧集，放弃自动选择。")
            raise AmbiguousMatchError(f"匹配到 {len(matches)} 个剧集，无法确定")
        if not data.get('isMatched') or not matches:
            raise NoMatchError(f"未找到与 '{path.name}' 匹配的剧集")

        match = matches[0]
        try:
            episode_id = int(match['episodeId'])
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseParseError(f"匹配结果缺失关键字段 'episodeId': {match!r}") from e

        self.logger.info(f"匹配成功: {match.get('animeTitle', '')} {match.get('episodeTitle', '')} (ID: {episode_id})")
        return EpisodeTarget(episode_id=episode_id)


class SearchMatcher:
    """按 "标题 季-集" 搜索各视频站点的播放页面"""
    def __init__(self, search_client: SearchApiClient):
        self.client = search_client
        self.logger = logging.getLogger("SearchMatcher")

    def match(self, text: str) -> PlayUrlTarget:
        query = parse_title_query(text)
        self.logger.info(f"按标题搜索: {query.display_string}")

        rows = []
        for raw in self.client.search(query.title):
            row = decode_search_row(raw)
            if row is not None:
                rows.append(row)

        row = self.select_row(rows, query)
        url = self.resolve(row, query)
        self.logger.info(f"已选择 '{row.title}' 的播放链接: {url}")
        return PlayUrlTarget(url=url, title=row.title)

    @staticmethod
    def select_row(rows: list[SearchRow], query: TitleQuery) -> SearchRow:
        if not rows:
            raise NoMatchError(f"没有找到 '{query.title}' 的搜索结果")
        if query.season is None:
            return rows[0]

        for row in rows:
            if has_season_marker(row.title, query.season):
                return row
        if query.season == 1:
            return rows[0]
        raise NoMatchError(f"没有找到 '{query.title}' 第 {query.season} 季")

    def resolve(self, row: SearchRow, query: TitleQuery) -> str:
        """从选中的结果行中取出目标集数的播放链接"""
        if isinstance(row, SeriesRow):
            return self._resolve_series(row, query.episode)
        if isinstance(row, MovieRow):
            return self._resolve_movie(row)
        if isinstance(row, ShowRow):
            return self._resolve_show(row, query.episode)
        raise TypeError(f"未知的搜索结果类型: {row!r}")

    @staticmethod
    def _resolve_series(row: SeriesRow, episode: int) -> str:
        if not 1 <= episode <= len(row.episodes):
            raise EpisodeOutOfRangeError(f"'{row.title}' 共 {len(row.episodes)} 集，没有第 {episode} 集")
        return row.episodes[episode - 1].url

    @staticmethod
    def _resolve_movie(row: MovieRow) -> str:
        for site in PROVIDER_PRIORITY:
            link = row.links.get(site)
            if link and link.url:
                return link.url
        raise NoLinksAvailableError(f"'{row.title}' 没有可用的播放链接")

    def _resolve_show(self, row: ShowRow, episode: int) -> str:
        site = next((s for s in PROVIDER_PRIORITY if s in row.totals), None)
        if site is None:
            raise VipSiteNotFoundError(f"综艺 '{row.title}' 没有已知分期数的站点")

        total = row.totals[site]
        if not 1 <= episode <= total:
            raise EpisodeOutOfRangeError(f"'{row.title}' 在 {site} 共 {total} 期，没有第 {episode} 期")

        years = row.years.get(site) or [""]
        items = self.client.get_show_episodes(site, row.ent_id, offset=total - episode, count=1, year=years[0])
        if not items:
            raise EpisodeOutOfRangeError(f"'{row.title}' 在 {site} 找不到第 {episode} 期")
        return PlayLink.decode(items[0]).url
