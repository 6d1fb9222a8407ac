import logging
from pathlib import Path

from ..exceptions import FetchCancelledError
from ..models.danmaku import DanmakuTrack
from ..state import ApiAuthConfig
from ..workers import CancelToken
from .danmaku_filter import DanmakuFilter
from .fetcher import CommentFetcher
from .matcher import FingerprintMatcher, SearchMatcher
from .parser import DanmakuParser

from ...api.dandan_api_client import DandanApiClient
from ...api.search_api_client import SearchApiClient


def check_cancelled(cancel_token: CancelToken | None, stage: str):
    if cancel_token is not None and cancel_token.is_cancelled():
        raise FetchCancelledError(f"弹幕加载已在{stage}后取消")


class DanmakuLoader:
    """
    弹幕加载流程: 匹配 -> 获取 -> 标准化/过滤。
    本地文件使用指纹匹配，其余（网络流、标题）使用标题搜索。
    每个阶段之间检查取消标记；取消时关闭网络会话，使阻塞中的请求尽快失败。
    """
    def __init__(self, auth_config: ApiAuthConfig, danmaku_filter: DanmakuFilter):
        self.auth_config = auth_config
        self.parser = DanmakuParser(danmaku_filter)
        self.logger = logging.getLogger("DanmakuLoader")

    def __call__(self, media: str, cancel_token: CancelToken | None = None) -> DanmakuTrack:
        return self.load(media, cancel_token)

    def load(self, media: str, cancel_token: CancelToken | None = None) -> DanmakuTrack:
        is_cancelled = cancel_token.is_cancelled if cancel_token is not None else None

        with DandanApiClient.from_config(self.auth_config) as dandan_client:
            if cancel_token is not None:
                cancel_token.add_cancel_callback(dandan_client.close)

            if Path(media).is_file():
                self.logger.info(f"使用文件指纹匹配: {media}")
                target = FingerprintMatcher(dandan_client, is_cancelled).match(media)
            else:
                self.logger.info(f"使用标题搜索匹配: {media}")
                with SearchApiClient(self.auth_config.use_system_proxy) as search_client:
                    if cancel_token is not None:
                        cancel_token.add_cancel_callback(search_client.close)
                    target = SearchMatcher(search_client).match(media)

            check_cancelled(cancel_token, "匹配")
            raw_comments = CommentFetcher(dandan_client).fetch(target)

        check_cancelled(cancel_token, "获取")
        return self.parser.normalize(raw_comments)
