import logging

from ..exceptions import ResponseParseError
from ..models.structs import EpisodeTarget, MatchTarget, PlayUrlTarget, RawComment

from ...api.dandan_api_client import DandanApiClient


def parse_comment_payload(payload: dict) -> list[RawComment]:
    """
    解析弹幕接口响应。
    每条弹幕的 p 属性格式为 "时间,模式,颜色,用户"，只做拆分，不做过滤和排序。

    Raises:
        ResponseParseError 当响应结构或时间字段不合法时
    """
    comments = payload.get('comments')
    if not isinstance(comments, list):
        raise ResponseParseError("弹幕响应缺失 'comments' 列表")

    records = []
    for i, item in enumerate(comments):
        try:
            p_attr = str(item['p']).split(',', 3)
            message = str(item['m'])
            time = float(p_attr[0])
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseParseError(f"第 {i+1} 条弹幕格式错误: {item!r}") from e

        records.append(RawComment(
            time=time,
            color=p_attr[2] if len(p_attr) > 2 else "",
            message=message,
            user=p_attr[3] if len(p_attr) > 3 else ""
        ))
    return records


class CommentFetcher:
    """根据匹配结果从对应接口获取原始弹幕"""
    def __init__(self, api_client: DandanApiClient):
        self.client = api_client
        self.logger = logging.getLogger("CommentFetcher")

    def fetch(self, target: MatchTarget) -> list[RawComment]:
        if isinstance(target, EpisodeTarget):
            payload = self.client.get_comments(target.episode_id)
        elif isinstance(target, PlayUrlTarget):
            payload = self.client.get_ext_comments(target.url)
        else:
            raise TypeError(f"未知的匹配结果类型: {target!r}")

        records = parse_comment_payload(payload)
        self.logger.info(f"获取到 {len(records)} 条原始弹幕。")
        return records
