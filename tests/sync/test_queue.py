"""
Unit tests for the offline sync queue.
"""

import threading
from unittest.mock import MagicMock, patch

import pytest

from src.sync.queue import APP_NAME, EVENT_SCHEMA, RemoteEndpoint, SyncQueue

URL = "https://example.org/exec"


@pytest.fixture
def queue_path(tmp_path):
    return tmp_path / "sync-buffer.json"


def _fill(queue, count):
    for i in range(count):
        queue.enqueue("result", f"P{i}", {"score_pct": i})


class TestEnqueue:
    """Tests for queuing events."""

    def test_event_is_stamped(self, queue_path):
        queue = SyncQueue(queue_path)

        item = queue.enqueue("result", "A", {"score_pct": 72})

        assert item["type"] == "result"
        assert item["problem"] == "A"
        assert item["payload"] == {"score_pct": 72}
        assert item["app"] == APP_NAME
        assert item["schema"] == EVENT_SCHEMA
        assert item["ts"] > 0
        assert "device" in item

    def test_queue_persists(self, queue_path):
        _fill(SyncQueue(queue_path), 2)

        reloaded = SyncQueue(queue_path)

        assert reloaded.pending == 2
        assert [item["problem"] for item in reloaded.items] == ["P0", "P1"]

    def test_corrupt_file_starts_empty(self, queue_path):
        queue_path.write_text("{oops", encoding="utf-8")
        assert SyncQueue(queue_path).pending == 0

    def test_non_list_file_starts_empty(self, queue_path):
        queue_path.write_text('{"type": "result"}', encoding="utf-8")
        assert SyncQueue(queue_path).pending == 0


class TestFlush:
    """Tests for ordered, stop-on-failure delivery."""

    def test_no_endpoint_is_noop(self, queue_path):
        transport = MagicMock(return_value=True)
        queue = SyncQueue(queue_path, transport=transport)
        _fill(queue, 2)

        assert queue.flush() == 0
        assert queue.pending == 2
        transport.assert_not_called()

    def test_empty_queue_is_noop(self, queue_path):
        transport = MagicMock(return_value=True)
        queue = SyncQueue(queue_path, RemoteEndpoint(URL), transport=transport)

        assert queue.flush() == 0
        transport.assert_not_called()

    def test_sends_in_order(self, queue_path):
        sent = []
        queue = SyncQueue(
            queue_path,
            RemoteEndpoint(URL, "tok"),
            transport=lambda url, item, token: sent.append(item["problem"]) or True,
        )
        _fill(queue, 3)

        assert queue.flush() == 3
        assert sent == ["P0", "P1", "P2"]
        assert queue.pending == 0
        assert SyncQueue(queue_path).pending == 0

    def test_stops_at_first_failure(self, queue_path):
        transport = MagicMock(side_effect=[True, False])
        queue = SyncQueue(queue_path, RemoteEndpoint(URL), transport=transport)
        _fill(queue, 3)

        assert queue.flush() == 1
        assert transport.call_count == 2
        assert queue.pending == 2
        assert queue.items[0]["problem"] == "P1"
        assert SyncQueue(queue_path).pending == 2

    def test_retry_resumes_from_failed_item(self, queue_path):
        transport = MagicMock(side_effect=[False, True, True])
        queue = SyncQueue(queue_path, RemoteEndpoint(URL), transport=transport)
        _fill(queue, 2)

        assert queue.flush() == 0
        assert queue.flush() == 2
        problems = [c.args[1]["problem"] for c in transport.call_args_list]
        assert problems == ["P0", "P0", "P1"]

    def test_no_concurrent_flush(self, queue_path):
        inner_results = []

        def transport(url, item, token):
            assert queue.is_syncing
            inner_results.append(queue.flush())
            return True

        queue = SyncQueue(queue_path, RemoteEndpoint(URL), transport=transport)
        _fill(queue, 1)

        assert queue.flush() == 1
        assert inner_results == [0]
        assert not queue.is_syncing

    def test_set_remote_endpoint(self, queue_path):
        transport = MagicMock(return_value=True)
        queue = SyncQueue(queue_path, transport=transport)
        _fill(queue, 1)

        queue.set_remote_endpoint(URL, token="s3cret")

        assert queue.flush() == 1
        url, _, token = transport.call_args.args
        assert url == URL
        assert token == "s3cret"

    def test_default_transport_posts_json(self, queue_path):
        queue = SyncQueue(queue_path, RemoteEndpoint(URL, "s3cret"))
        _fill(queue, 1)

        with patch("src.sync.queue.post_json", return_value=True) as mock_post:
            assert queue.flush() == 1

        args, kwargs = mock_post.call_args
        assert args[0] == URL
        assert args[1]["problem"] == "P0"
        assert kwargs["token"] == "s3cret"


class TestConcurrency:
    """Tests for enqueue and flush running on several threads."""

    def test_parallel_enqueue(self, queue_path):
        queue = SyncQueue(queue_path)
        errors = []

        def worker(n):
            try:
                for i in range(100):
                    queue.enqueue("result", f"T{n}-{i}", {})
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert queue.pending == 400
        assert SyncQueue(queue_path).pending == 400
        assert [p.name for p in queue_path.parent.iterdir()] == [queue_path.name]

    def test_enqueue_during_flush(self, queue_path):
        delivered = []
        queue = SyncQueue(
            queue_path,
            RemoteEndpoint(URL),
            transport=lambda url, item, token: delivered.append(item) or True,
        )
        errors = []

        def producer():
            try:
                for i in range(200):
                    queue.enqueue("result", f"P{i}", {})
            except Exception as e:
                errors.append(e)

        def flusher():
            try:
                for _ in range(50):
                    queue.flush()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=producer), threading.Thread(target=flusher)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        queue.flush()

        assert errors == []
        assert [item["problem"] for item in delivered] == [f"P{i}" for i in range(200)]
        assert queue.pending == 0
        assert SyncQueue(queue_path).pending == 0
