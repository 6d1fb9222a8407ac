from dataclasses import dataclass


@dataclass
class RawComment:
    """接口返回的单条原始弹幕"""
    time: float
    color: str
    message: str
    user: str


@dataclass
class Placement:
    """某一帧中一条可见弹幕的绘制信息"""
    x: float
    y: float
    color: tuple[int, int, int]
    message: str
    font_size: float


@dataclass
class TitleQuery:
    """从 "标题 季-集" 形式的字符串解析出的搜索条件"""
    title: str
    season: int | None = None
    episode: int = 1

    @property
    def display_string(self) -> str:
        if self.season is not None:
            return f"{self.title} S{self.season}E{self.episode}"
        return f"{self.title} E{self.episode}"


@dataclass
class Lane:
    """
    单帧内的轨道占用情况。
    end: 当前占用者尾部的横坐标；step: 该占用者的每帧位移。
    """
    end: float
    step: float

    @property
    def is_virgin(self) -> bool:
        return self.end == 0


@dataclass(frozen=True)
class EpisodeTarget:
    """文件指纹匹配得到的弹弹Play剧集ID"""
    episode_id: int


@dataclass(frozen=True)
class PlayUrlTarget:
    """标题搜索得到的第三方播放页面链接"""
    url: str
    title: str = ""


MatchTarget = EpisodeTarget | PlayUrlTarget
