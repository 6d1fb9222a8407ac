from .exceptions import DanmakuException
from .models.errors import DanmakuErrorCode


def normalize_exception(e: Exception) -> DanmakuErrorCode:
    """将任意异常转换为标准错误码"""
    if isinstance(e, DanmakuException):
        return e.error_code

    code = getattr(e, "code", None)
    if isinstance(code, int):
        found = DanmakuErrorCode.from_code(code)
        if found:
            return found

    return DanmakuErrorCode.UNKNOWN_ERROR

def describe_exception(e: Exception) -> str:
    """生成用于 OSD 提示的简短描述"""
    error_code = normalize_exception(e)
    if isinstance(e, DanmakuException) and e.message:
        return e.message
    if error_code is DanmakuErrorCode.UNKNOWN_ERROR and str(e).strip():
        return f"{error_code.description} ({e})"
    return error_code.description
