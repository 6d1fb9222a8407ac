from .models.errors import DanmakuErrorCode


class DanmakuException(Exception):
    """弹幕流程中所有可预期错误的基类，均不会导致进程退出"""
    error_code = DanmakuErrorCode.UNKNOWN_ERROR

    def __init__(self, message: str = ""):
        self.message = message or self.error_code.description
        super().__init__(self.message)

    @property
    def code(self) -> int:
        return self.error_code.code


class NoMatchError(DanmakuException):
    error_code = DanmakuErrorCode.NO_MATCH


class AmbiguousMatchError(DanmakuException):
    error_code = DanmakuErrorCode.AMBIGUOUS_MATCH


class EpisodeOutOfRangeError(DanmakuException):
    error_code = DanmakuErrorCode.EPISODE_OUT_OF_RANGE


class NoLinksAvailableError(DanmakuException):
    error_code = DanmakuErrorCode.NO_LINKS_AVAILABLE


class VipSiteNotFoundError(DanmakuException):
    error_code = DanmakuErrorCode.VIP_SITE_NOT_FOUND


class NetworkError(DanmakuException):
    error_code = DanmakuErrorCode.NETWORK_ERROR


class ResponseParseError(DanmakuException):
    error_code = DanmakuErrorCode.RESPONSE_PARSE_ERROR


class ConfigParseError(DanmakuException):
    error_code = DanmakuErrorCode.CONFIG_PARSE_ERROR


class ArgumentError(DanmakuException):
    error_code = DanmakuErrorCode.ARGUMENT_ERROR


class FetchCancelledError(DanmakuException):
    """加载任务被新的任务取代，结果与错误都会被丢弃"""
    error_code = DanmakuErrorCode.FETCH_CANCELLED
