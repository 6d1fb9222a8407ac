from ..config.app_config import Links
from ..core.exceptions import NetworkError
from .base_client import BaseApiClient


class DandanApiClient(BaseApiClient):
    """
    一个专门用于与弹弹Play开放接口交互的客户端。
    接口文档: https://api.dandanplay.net/swagger/ui/index
    """
    def __init__(self, app_id: str = "", app_secret: str = "", use_system_proxy: bool = True):
        super().__init__(use_system_proxy)
        if app_id and app_secret:
            self.session.headers.update({
                'X-AppId': app_id,
                'X-AppSecret': app_secret
            })
        else:
            self.logger.debug("未配置弹弹Play AppId/AppSecret，将以匿名方式访问。")

    def _check_payload(self, url: str, payload: dict):
        if payload.get('success', True) is False:
            code = payload.get('errorCode', -1)
            message = payload.get('errorMessage') or '未知错误'
            self.logger.debug(f"API请求失败: {url}, Code: {code}, Message: {message}")
            raise NetworkError(f"弹弹Play 接口错误 [Code: {code}]: {message}")

    def match(self, file_name: str, file_hash: str, file_size: int) -> dict:
        """按文件名与文件头哈希匹配剧集"""
        body = {
            'fileName': file_name,
            'fileHash': file_hash,
            'fileSize': file_size,
            'matchMode': 'hashAndFileName'
        }
        self.logger.info(f"正在匹配文件: {file_name} ({file_hash})")
        return self._request('POST', Links.DANDAN_MATCH, json=body)

    def get_comments(self, episode_id: int) -> dict:
        """获取指定剧集的弹幕（含第三方关联弹幕）"""
        url = f"{Links.DANDAN_COMMENT}/{episode_id}"
        self.logger.info(f"正在获取剧集弹幕: {episode_id}")
        return self._request('GET', url, params={'withRelated': 'true'})

    def get_ext_comments(self, play_url: str) -> dict:
        """获取第三方视频页面对应的弹幕"""
        self.logger.info(f"正在获取第三方弹幕: {play_url}")
        return self._request('GET', Links.DANDAN_EXT_COMMENT, params={'url': play_url})

    @classmethod
    def from_config(cls, auth_config) -> 'DandanApiClient':
        """由 ApiAuthConfig 创建客户端"""
        return cls(
            app_id=auth_config.app_id,
            app_secret=auth_config.app_secret,
            use_system_proxy=auth_config.use_system_proxy
        )
