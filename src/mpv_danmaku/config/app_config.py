class AppInfo:
    """存放应用元数据"""
    NAME = "mpv 弹幕"
    NAME_EN = "MpvDanmaku"
    CLIENT_NAME = "danmaku"
    AUTHOR = "TouhouGleaners"
    VERSION = "1.0.0"
    LOG_FILE_NAME = "latest.log"
    LOG_DIR_NAME = "logs"


class Links:
    """存放所有外部URL"""
    DANDAN_API_BASE = "https://api.dandanplay.net/api/v2"
    DANDAN_MATCH = f"{DANDAN_API_BASE}/match"
    DANDAN_COMMENT = f"{DANDAN_API_BASE}/comment"
    DANDAN_EXT_COMMENT = f"{DANDAN_API_BASE}/extcomment"

    SEARCH_API_BASE = "https://api.so.360kan.com"
    SEARCH_INDEX = f"{SEARCH_API_BASE}/index"
    SEARCH_SHOW_EPISODES = f"{SEARCH_API_BASE}/episodeszongyi"


class Playback:
    """弹幕滚动相关的静态参数"""
    DURATION = 12.0         # 最低速度下横穿屏幕的时长（秒）
    INTERVAL = 0.005        # 刷新间隔（秒）
    MAX_SPEEDUP = 1.3       # 最高速度相对最低速度的倍数
    BASE_WIDTH = 1920.0
    BASE_HEIGHT = 1080.0
    FINGERPRINT_BYTES = 16 * 1024 * 1024


# 影视站点优先级（电影 / 综艺选择链接时按此顺序）
PROVIDER_PRIORITY = (
    "qq", "qiyi", "youku", "imgo", "bilibili1", "leshi",
    "sohu", "pptv", "m1905", "xigua", "cntv",
)
