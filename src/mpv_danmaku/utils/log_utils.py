import logging
import logging.handlers
from pathlib import Path
from datetime import datetime, timezone


# mpv 日志级别 -> logging 级别
MPV_LOG_LEVELS = {
    'fatal': logging.CRITICAL,
    'error': logging.ERROR,
    'warn': logging.WARNING,
    'info': logging.INFO,
    'v': logging.DEBUG,
    'debug': logging.DEBUG,
    'trace': logging.DEBUG,
}

mpv_logger = logging.getLogger("mpv")


def forward_mpv_log(loglevel: str, component: str, message: str):
    """将 mpv 自身的日志转发到 logging，作为 python-mpv 的 log_handler 使用"""
    level = MPV_LOG_LEVELS.get(loglevel, logging.INFO)
    mpv_logger.log(level, f"[{component}] {message.rstrip()}")


class DailyLogFileHandler(logging.handlers.TimedRotatingFileHandler):
    """
    按天轮转的日志文件:
    - 当前活动日志文件名为 'latest.log'。
    - 轮转后的历史日志文件名为 'YYYY-MM-DD.log'。
    父类的 `doRollover` 会调用 `rotation_filename` 生成归档文件名。
    """
    def rotation_filename(self, default_name: str) -> str:
        rollover_time = self.rolloverAt - self.interval  # 即将归档的文件开始写入的时间点
        if self.utc:
            archive_datetime = datetime.fromtimestamp(rollover_time, tz=timezone.utc)
        else:
            archive_datetime = datetime.fromtimestamp(rollover_time)

        base_path = Path(self.baseFilename)
        return str(base_path.parent / f"{archive_datetime.strftime('%Y-%m-%d')}.log")
