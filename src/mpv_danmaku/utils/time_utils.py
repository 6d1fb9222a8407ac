def format_timestamp(seconds: float) -> str:
    """将弹幕时间（秒）格式化为 HH:MM:SS.mmm / MM:SS.mmm 字符串"""
    if seconds is None or seconds < 0:
        return "-:--.---"

    total_ms = int(round(seconds * 1000))
    total_seconds, ms = divmod(total_ms, 1000)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60

    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}.{ms:03d}"
    else:
        return f"{minutes:02d}:{secs:02d}.{ms:03d}"

def format_delay(seconds: float) -> str:
    """弹幕延迟的显示文本，单位毫秒"""
    return f"{seconds * 1000:.2f} ms"
