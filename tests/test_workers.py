import threading

from mpv_danmaku.core.workers import BaseWorker, FetchWorker

from conftest import make_track


def test_cancel_runs_registered_callbacks_once():
    worker = BaseWorker()
    calls = []
    worker.add_cancel_callback(lambda: calls.append("close"))

    worker.cancel()
    worker.cancel()

    assert worker.is_cancelled()
    assert calls == ["close"]


def test_callback_added_after_cancel_runs_immediately():
    worker = BaseWorker()
    worker.cancel()
    calls = []

    worker.add_cancel_callback(lambda: calls.append("close"))

    assert calls == ["close"]


def test_fetch_worker_waits_for_previous_worker():
    release = threading.Event()
    order = []

    def slow_loader(media, cancel_token):
        release.wait(5)
        order.append(media)
        return make_track()

    def fast_loader(media, cancel_token):
        order.append(media)
        return make_track()

    def ignore(*args):
        pass

    previous = FetchWorker("old", slow_loader, ignore, ignore)
    previous.start()
    current = FetchWorker("new", fast_loader, lambda worker, track: order.append("done"), ignore, previous=previous)
    current.start()

    current.join(0.2)
    assert current.is_alive()
    assert order == []

    release.set()
    current.join(5)

    assert order == ["old", "new", "done"]
    assert current.previous is None


def test_fetch_worker_cancelled_before_start_never_loads():
    calls = []
    worker = FetchWorker("media", lambda media, token: calls.append(media), calls.append, calls.append)
    worker.cancel()

    worker.start()
    worker.join(5)

    assert calls == []
