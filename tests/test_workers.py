import pytest

from teldrive.workers import StreamWorker, UploadWorker


def test_upload_worker_round_robin():
    worker = UploadWorker()
    worker.set(["a", "b"], 1)
    assert worker.next(1) == ("a", 0)
    assert worker.next(1) == ("b", 1)
    assert worker.next(1) == ("a", 0)


def test_upload_worker_set_same_channel_is_ignored():
    worker = UploadWorker()
    worker.set(["a", "b"], 1)
    worker.set(["c"], 1)
    assert worker.next(1) == ("a", 0)


def test_upload_worker_new_channel_replaces_old():
    worker = UploadWorker()
    worker.set(["a"], 1)
    worker.set(["c"], 2)
    assert worker.next(2) == ("c", 0)
    with pytest.raises(LookupError):
        worker.next(1)


class _Recorder:
    def __init__(self, fail=False):
        self.connected = []
        self.fail = fail

    def factory(self, token):
        return f"client-{token}"

    def connect(self, client):
        if self.fail:
            raise ConnectionError("cannot connect")
        self.connected.append(client)
        return lambda: client


def test_stream_worker_connects_once_per_client():
    rec = _Recorder()
    worker = StreamWorker(rec.factory, rec.connect)
    worker.set(["a", "b"], 5)
    first, i0 = worker.next(5)
    second, i1 = worker.next(5)
    again, i2 = worker.next(5)
    assert (i0, i1, i2) == (0, 1, 0)
    assert first.tg == rec.factory("a")
    assert again is first
    assert first.status == "running"
    assert rec.connected == [rec.factory("a"), rec.factory("b")]
    assert first.stop() == first.tg


def test_stream_worker_connect_error_propagates():
    rec = _Recorder(fail=True)
    worker = StreamWorker(rec.factory, rec.connect)
    worker.set(["a"], 5)
    with pytest.raises(ConnectionError):
        worker.next(5)


def test_stream_worker_unknown_channel():
    rec = _Recorder()
    worker = StreamWorker(rec.factory, rec.connect)
    with pytest.raises(LookupError):
        worker.next(9)


def test_user_worker_keeps_first_client():
    rec = _Recorder()
    worker = StreamWorker(rec.factory, rec.connect)
    first = worker.user_worker("user-client", 42)
    second = worker.user_worker("other-client", 42)
    assert second is first
    assert first.tg == "user-client"
    assert first.status == "running"
    assert rec.connected == ["user-client"]