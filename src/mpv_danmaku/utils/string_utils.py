import re

from ..core.exceptions import ArgumentError
from ..core.models.structs import TitleQuery


# 按优先级排列的 "季-集" 后缀写法
SUFFIX_PATTERNS = (
    # S02E05 / Season 2 Episode 5 (可不带分隔符)
    re.compile(r"[\s\-_/]*[Ss](?:eason)?\s*(?P<season>\d{1,3})\s*[\-_/.]?\s*[Ee](?:[Pp](?:isode)?)?\s*(?P<episode>\d{1,4})$"),
    # 第2季第5集 / 第2季 5
    re.compile(r"[\s\-_/]*第(?P<season>\d{1,3})季\s*[\-_/]?\s*第?(?P<episode>\d{1,4})[集话話期]?$"),
    # 第5集 / 第5话 / 第5期
    re.compile(r"[\s\-_/]*第(?P<episode>\d{1,4})[集话話期]$"),
    # E5 / EP5
    re.compile(r"[\s\-_/]+[Ee](?:[Pp](?:isode)?)?\s*(?P<episode>\d{1,4})$"),
    # 2-5 / 2x5 / 2/5
    re.compile(r"[\s\-_/]+(?P<season>\d{1,3})\s*[\-_/xX]\s*(?P<episode>\d{1,4})$"),
    # 5
    re.compile(r"[\s\-_/]+(?P<episode>\d{1,4})$"),
)


def parse_title_query(text: str) -> TitleQuery:
    """
    从 "标题[-/空格]季-集" 形式的文本中提取标题、季和集。
    未指定集数时默认为第 1 集。

    Raises:
        ArgumentError 当文本中没有标题时
    """
    text = (text or "").strip()

    for pattern in SUFFIX_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        title = text[:match.start()].strip(" -_/")
        if not title:
            continue

        groups = match.groupdict()
        season = groups.get('season')
        return TitleQuery(
            title=title,
            season=int(season) if season else None,
            episode=int(groups['episode'])
        )

    if not text:
        raise ArgumentError("缺少要搜索的标题")
    return TitleQuery(title=text)
