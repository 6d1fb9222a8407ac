import sys
import argparse
import logging
from pathlib import Path
from platformdirs import user_data_dir

from .config.app_config import AppInfo
from .utils.log_utils import DailyLogFileHandler


def setup_logging():
    """
    配置全局日志系统
    包含：控制台输出、文件轮转输出
    """
    formatter = logging.Formatter(
        '%(asctime)s [%(name)s] %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    # Handler 1: 文件日志 (按天轮转)
    log_dir = Path(user_data_dir(AppInfo.NAME_EN, AppInfo.AUTHOR)) / AppInfo.LOG_DIR_NAME
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file_path = log_dir / AppInfo.LOG_FILE_NAME

    file_handler = DailyLogFileHandler(
        filename=str(log_file_path),
        when='midnight',
        interval=1,
        backupCount=7,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)

    # Handler 2: 控制台输出，播放时只显示较重要的信息
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.INFO)
    root_logger.addHandler(console_handler)

    # 设置第三方库日志级别
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.info(f"日志系统初始化完成。日志路径: {log_file_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=AppInfo.CLIENT_NAME, description=f"{AppInfo.NAME} v{AppInfo.VERSION}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    play_parser = subparsers.add_parser("play", help="播放媒体并显示弹幕")
    play_parser.add_argument("media", help="本地文件路径或网络地址")
    play_parser.add_argument("--title", help="非本地文件时用于搜索的媒体标题，例如 \"某动画 S02E05\"")
    play_parser.add_argument("--enable", action="store_true", help="启动后立即开启弹幕")

    cred_parser = subparsers.add_parser("credentials", help="保存弹弹Play开放平台凭证")
    cred_parser.add_argument("app_id")
    cred_parser.add_argument("app_secret")
    return parser


def play(args) -> int:
    from .core.controller import DanmakuController
    from .host.mpv_host import MpvHost

    options = {}
    if args.title:
        options["force_media_title"] = args.title

    host = MpvHost.create(**options)
    try:
        controller = DanmakuController(host)
        if args.enable:
            controller.enabled = True
        host.play(args.media)
        controller.run()
    finally:
        host.terminate()
    return 0


def save_credentials(args) -> int:
    from .utils.credential_manager import save_credentials as save

    if save(args.app_id, args.app_secret):
        print("凭证已保存。")
        return 0
    print("凭证保存失败，详情请查看日志。", file=sys.stderr)
    return 1


def main(argv=None):
    """
    程序主入口

    Args:
        argv: 命令行参数列表，默认使用 sys.argv[1:]
    """
    args = build_parser().parse_args(argv)

    setup_logging()

    if args.command == "credentials":
        sys.exit(save_credentials(args))
    sys.exit(play(args))


if __name__ == "__main__":
    main()
