import asyncio
import logging
import threading
from collections import defaultdict
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

_Listener = tuple[asyncio.AbstractEventLoop, asyncio.Queue]


class RealtimeService:
    """Fans project events out to connected WebSocket clients.

    Publishers may run on any thread (sync route handlers, job threads);
    each listener's queue is fed on the event loop that created it.
    """

    def __init__(self) -> None:
        self._listeners: dict[int, list[_Listener]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, project_id: int) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        with self._lock:
            self._listeners[project_id].append((asyncio.get_running_loop(), queue))
        return queue

    def unsubscribe(self, project_id: int, queue: asyncio.Queue) -> None:
        with self._lock:
            listeners = self._listeners.get(project_id, [])
            self._listeners[project_id] = [item for item in listeners if item[1] is not queue]
            if not self._listeners[project_id]:
                del self._listeners[project_id]

    def listener_count(self, project_id: int) -> int:
        with self._lock:
            return len(self._listeners.get(project_id, []))

    def total_listeners(self) -> int:
        with self._lock:
            return sum(len(listeners) for listeners in self._listeners.values())

    def publish(self, project_id: int, event: str, data: dict[str, Any]) -> int:
        message = {
            "event": event,
            "project_id": project_id,
            "data": data,
            "sent_at": datetime.now(UTC).isoformat(),
        }
        with self._lock:
            listeners = list(self._listeners.get(project_id, []))

        delivered = 0
        for loop, queue in listeners:
            if loop.is_closed():
                logger.warning("Dropping realtime listener with closed loop for project %s", project_id)
                self.unsubscribe(project_id, queue)
                continue
            loop.call_soon_threadsafe(queue.put_nowait, message)
            delivered += 1
        return delivered


realtime_service = RealtimeService()
