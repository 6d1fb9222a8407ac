from __future__ import annotations
from enum import Enum


class DanmakuErrorCode(Enum):
    """
    弹幕加载与控制流程中的错误码及其默认描述
    定义格式: (code, description)
    """
    description: str

    # 匹配类
    NO_MATCH = (1001, "未找到匹配的剧集。")
    AMBIGUOUS_MATCH = (1002, "匹配到多个剧集，无法确定。")
    EPISODE_OUT_OF_RANGE = (1003, "请求的集数超出范围。")
    NO_LINKS_AVAILABLE = (1004, "没有可用的播放链接。")
    VIP_SITE_NOT_FOUND = (1005, "没有找到可用的视频站点。")

    # 网络/响应类
    NETWORK_ERROR = (2001, "网络连接错误，请检查网络或代理设置。")
    RESPONSE_PARSE_ERROR = (2002, "无法解析服务器响应。")

    # 本地输入类
    CONFIG_PARSE_ERROR = (3001, "配置文件格式错误。")
    ARGUMENT_ERROR = (3002, "命令参数错误。")
    FETCH_CANCELLED = (3003, "弹幕加载已取消。")

    UNKNOWN_ERROR = (9999, "发生未知异常，请查看日志。")

    def __new__(cls, code, description):
        obj = object.__new__(cls)
        obj._value_ = code
        obj.description = description
        return obj

    @property
    def code(self) -> int:
        """返回错误码的数值"""
        return self.value

    @classmethod
    def from_code(cls, code: int) -> DanmakuErrorCode | None:
        """通过数字错误码反向查找对应的枚举成员"""
        try:
            return cls(code)
        except ValueError:
            return None
