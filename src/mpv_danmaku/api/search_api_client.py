from ..config.app_config import Links
from ..core.exceptions import NetworkError, ResponseParseError
from .base_client import BaseApiClient


class SearchApiClient(BaseApiClient):
    """影视搜索接口客户端，用于按标题查找各站点的播放链接"""

    def _check_payload(self, url: str, payload: dict):
        errno = payload.get('errno', 0)
        if str(errno) != '0':
            message = payload.get('msg') or '未知错误'
            self.logger.debug(f"搜索接口请求失败: {url}, Code: {errno}, Message: {message}")
            raise NetworkError(f"搜索接口错误 [Code: {errno}]: {message}")

    def search(self, keyword: str) -> list[dict]:
        """按关键词搜索，返回原始结果行列表"""
        params = {
            'force_v': 1,
            'kw': keyword,
            'from': '',
            'pageno': 1,
            'v_ap': 1,
            'tab': 'all'
        }
        self.logger.info(f"正在搜索: {keyword}")
        payload = self._request('GET', Links.SEARCH_INDEX, params=params)

        try:
            rows = payload['data']['longData']['rows']
        except (KeyError, TypeError) as e:
            raise ResponseParseError(f"搜索结果缺失字段: {e}") from e
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise ResponseParseError("搜索结果 rows 不是列表")
        return rows

    def get_show_episodes(self, site: str, ent_id: str, offset: int, count: int = 1, year: str = "") -> list[dict]:
        """
        分页查询综艺节目的分期链接。
        offset 从最新一期开始计数。
        """
        params = {
            'site': site,
            'y': year,
            'entid': ent_id,
            'offset': offset,
            'count': count,
            'v_ap': 1
        }
        self.logger.info(f"正在查询综艺分期: {ent_id} @ {site}, offset={offset}")
        payload = self._request('GET', Links.SEARCH_SHOW_EPISODES, params=params)

        data = payload.get('data')
        if isinstance(data, dict):
            data = data.get('list')
        if data is None:
            return []
        if not isinstance(data, list):
            raise ResponseParseError("综艺分期结果不是列表")
        return data
