"""
Offline sync queue.

Events are appended to a JSON file and sent to the remote endpoint in
order. Sending stops at the first failure and leaves that event at the
head of the queue, so nothing is lost while offline and order is kept.
"""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from src.sync.client import post_json
from src.utils.device import guess_device, now_ms
from src.utils.io import load_json, save_json

logger = logging.getLogger(__name__)

APP_NAME = "kanji-write-quiz"
EVENT_SCHEMA = 1

Transport = Callable[[str, Dict[str, Any], str], bool]


@dataclass
class RemoteEndpoint:
    """Where queued events are sent."""

    url: str
    token: str = ""


class SyncQueue:
    """
    Persisted FIFO of events awaiting upload.

    Example:
        >>> queue = SyncQueue(Path("sync-buffer.json"))
        >>> queue.set_remote_endpoint("https://example.org/exec", token="s3cret")
        >>> queue.enqueue("result", "漢", {"score_pct": 72, "passed": True})
        >>> queue.flush()
        1
    """

    def __init__(
        self,
        path: Union[str, Path],
        endpoint: Optional[RemoteEndpoint] = None,
        transport: Optional[Transport] = None,
    ):
        """
        Args:
            path: JSON file holding pending events.
            endpoint: Remote endpoint; flushing is a no-op until one is set.
            transport: ``(url, item, token) -> bool`` sender. Defaults to an
                HTTP POST.
        """
        self.path = Path(path)
        self.endpoint = endpoint
        self.transport = transport or (
            lambda url, item, token: post_json(url, item, token=token)
        )
        self._flush_lock = threading.Lock()
        # Guards items and the file behind them
        self._items_lock = threading.RLock()
        self.items: List[Dict[str, Any]] = self._load()

    @property
    def pending(self) -> int:
        with self._items_lock:
            return len(self.items)

    @property
    def is_syncing(self) -> bool:
        return self._flush_lock.locked()

    def set_remote_endpoint(self, url: str, token: str = "") -> None:
        self.endpoint = RemoteEndpoint(url=url, token=token)

    def enqueue(
        self, event_type: str, problem: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Append one event and persist the queue.

        Returns:
            The stored event, stamped with time, device, app name and schema.
        """
        item = {
            "type": event_type,
            "problem": problem,
            "payload": payload,
            "ts": now_ms(),
            "device": guess_device(),
            "app": APP_NAME,
            "schema": EVENT_SCHEMA,
        }
        with self._items_lock:
            self.items.append(item)
            self._save()
        logger.debug(
            f"Queued {event_type} event for {problem!r} ({self.pending} pending)"
        )
        return item

    def flush(self) -> int:
        """
        Send queued events in order until the queue is empty or a send fails.

        No-op while another flush is running, when no endpoint is set, or
        when the queue is empty.

        Returns:
            Number of events delivered by this call.
        """
        if self.endpoint is None or self.pending == 0:
            return 0
        if not self._flush_lock.acquire(blocking=False):
            logger.debug("Flush already in progress")
            return 0

        sent = 0
        try:
            while True:
                with self._items_lock:
                    if not self.items:
                        break
                    item = self.items[0]
                # Send without holding the items lock
                if not self.transport(self.endpoint.url, item, self.endpoint.token):
                    logger.warning(
                        f"Sync interrupted, {self.pending} events remain queued"
                    )
                    break
                with self._items_lock:
                    self.items.pop(0)
                    self._save()
                sent += 1
        finally:
            self._flush_lock.release()

        if sent:
            logger.info(f"Synced {sent} events")
        return sent

    def _load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            items = load_json(self.path)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable sync queue {self.path}: {e}")
            return []
        if not isinstance(items, list):
            logger.warning(f"Ignoring malformed sync queue {self.path}")
            return []
        return items

    def _save(self) -> None:
        save_json(self.items, self.path)
