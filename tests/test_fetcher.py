import pytest

from mpv_danmaku.core.exceptions import FetchCancelledError, NoMatchError, ResponseParseError
from mpv_danmaku.core.models.danmaku import Source
from mpv_danmaku.core.models.structs import EpisodeTarget, PlayUrlTarget, RawComment
from mpv_danmaku.core.services import loader as loader_module
from mpv_danmaku.core.services.danmaku_filter import DanmakuFilter
from mpv_danmaku.core.services.fetcher import CommentFetcher, parse_comment_payload
from mpv_danmaku.core.state import ApiAuthConfig
from mpv_danmaku.core.workers import BaseWorker


PAYLOAD = {
    'count': 2,
    'comments': [
        {'cid': 1, 'p': "12.5,1,16777215,[BiliBili]abc,extra", 'm': "第一条"},
        {'cid': 2, 'p': "3.0,5,255", 'm': "第二条"},
    ]
}


class FakeCommentClient:
    def __init__(self, payload=PAYLOAD):
        self.payload = payload
        self.requests = []
        self.closed = False

    def get_comments(self, episode_id):
        self.requests.append(('episode', episode_id))
        return self.payload

    def get_ext_comments(self, play_url):
        self.requests.append(('url', play_url))
        return self.payload

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        self.closed = True


def test_parse_comment_payload():
    records = parse_comment_payload(PAYLOAD)

    assert records == [
        RawComment(time=12.5, color="16777215", message="第一条", user="[BiliBili]abc,extra"),
        RawComment(time=3.0, color="255", message="第二条", user=""),
    ]


@pytest.mark.parametrize("payload", [
    {},
    {'comments': "nope"},
    {'comments': [{'p': "abc,1,0,1", 'm': "x"}]},
    {'comments': [{'m': "x"}]},
])
def test_parse_comment_payload_rejects_malformed(payload):
    with pytest.raises(ResponseParseError):
        parse_comment_payload(payload)


def test_fetcher_dispatches_on_target():
    client = FakeCommentClient()
    fetcher = CommentFetcher(client)

    fetcher.fetch(EpisodeTarget(episode_id=7))
    fetcher.fetch(PlayUrlTarget(url="https://example.com/v"))

    assert client.requests == [('episode', 7), ('url', "https://example.com/v")]


def test_loader_uses_fingerprint_for_local_files(monkeypatch, tmp_path):
    media = tmp_path / "video.mkv"
    media.write_bytes(b"data")
    client = FakeCommentClient()
    matched = []

    class FakeFingerprintMatcher:
        def __init__(self, api_client, is_cancelled=None):
            assert api_client is client

        def match(self, path):
            matched.append(path)
            return EpisodeTarget(episode_id=99)

    monkeypatch.setattr(loader_module.DandanApiClient, "from_config", classmethod(lambda cls, config: client))
    monkeypatch.setattr(loader_module, "FingerprintMatcher", FakeFingerprintMatcher)

    danmaku_filter = DanmakuFilter(sources={Source.BILIBILI})
    track = loader_module.DanmakuLoader(ApiAuthConfig(), danmaku_filter)(str(media))

    assert matched == [str(media)]
    assert client.requests == [('episode', 99)]
    assert [c.time for c in track.comments] == [3.0, 12.5]
    assert [c.blocked for c in track.comments] == [False, True]


def test_loader_searches_titles(monkeypatch):
    client = FakeCommentClient()

    class FakeSearchMatcher:
        def __init__(self, search_client):
            pass

        def match(self, text):
            if text != "某动画 S01E02":
                raise NoMatchError("unexpected")
            return PlayUrlTarget(url="https://example.com/ep2")

    monkeypatch.setattr(loader_module.DandanApiClient, "from_config", classmethod(lambda cls, config: client))
    monkeypatch.setattr(loader_module, "SearchApiClient", lambda use_system_proxy: FakeCommentClient())
    monkeypatch.setattr(loader_module, "SearchMatcher", FakeSearchMatcher)

    track = loader_module.DanmakuLoader(ApiAuthConfig(), DanmakuFilter()).load("某动画 S01E02")

    assert client.requests == [('url', "https://example.com/ep2")]
    assert len(track) == 2


def test_loader_stops_after_cancelled_match(monkeypatch, tmp_path):
    media = tmp_path / "video.mkv"
    media.write_bytes(b"data")
    client = FakeCommentClient()
    worker = BaseWorker()

    class CancellingMatcher:
        def __init__(self, api_client, is_cancelled=None):
            self.is_cancelled = is_cancelled

        def match(self, path):
            # 新的媒体在匹配期间到来
            worker.cancel()
            assert self.is_cancelled()
            return EpisodeTarget(episode_id=99)

    monkeypatch.setattr(loader_module.DandanApiClient, "from_config", classmethod(lambda cls, config: client))
    monkeypatch.setattr(loader_module, "FingerprintMatcher", CancellingMatcher)

    with pytest.raises(FetchCancelledError):
        loader_module.DanmakuLoader(ApiAuthConfig(), DanmakuFilter()).load(str(media), worker)

    assert client.requests == []
    assert client.closed is True


def test_cancel_closes_open_sessions(monkeypatch):
    dandan_client = FakeCommentClient()
    search_client = FakeCommentClient()
    worker = BaseWorker()

    class BlockedSearchMatcher:
        def __init__(self, search_client):
            pass

        def match(self, text):
            worker.cancel()
            assert dandan_client.closed and search_client.closed
            raise NoMatchError("会话已关闭")

    monkeypatch.setattr(loader_module.DandanApiClient, "from_config", classmethod(lambda cls, config: dandan_client))
    monkeypatch.setattr(loader_module, "SearchApiClient", lambda use_system_proxy: search_client)
    monkeypatch.setattr(loader_module, "SearchMatcher", BlockedSearchMatcher)

    with pytest.raises(NoMatchError):
        loader_module.DanmakuLoader(ApiAuthConfig(), DanmakuFilter()).load("某动画", worker)
