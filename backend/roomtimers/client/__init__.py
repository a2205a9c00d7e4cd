"""Client-side synchronization engine for shared room timers.

`TimerClient` owns one connection session and keeps a projection of the
joined room's timers consistent with the authority. Presentation code reads
`timers` and `room_id`, calls the action methods, and may `subscribe` to be
told when the projection changed.
"""

import functools
import logging
import threading
from typing import Callable, Dict, List, Optional

from roomtimers.client.intents import IntentLayer
from roomtimers.client.membership import RoomMembership
from roomtimers.client.projection import TimerProjectionStore
from roomtimers.client.router import EventRouter
from roomtimers.client.session import ConnectionSession

logger = logging.getLogger(__name__)


class TimerClient:
    def __init__(self, session: Optional[ConnectionSession] = None, url: Optional[str] = None, channel=None):
        self.session = session or ConnectionSession(url=url, channel=channel)
        self.store = TimerProjectionStore()
        self.membership = RoomMembership(self.session, self.store)
        self.router = EventRouter(self.session, self.membership, self.store, on_change=self._notify)
        self.intents = IntentLayer(self.router, self.store, on_change=self._notify)
        # Inbound events arrive on the channel's reader thread
        self._lock = threading.RLock()
        self._subscribers: List[Callable] = []
        self.router.bind(wrap=self._serialized)
        self.session.on_connect(self._serialized(self._on_reconnect))

    def _serialized(self, fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            with self._lock:
                return fn(*args, **kwargs)
        return wrapper

    def _on_reconnect(self):
        # Missed events are not replayed; a fresh snapshot restores consistency
        self.membership.rejoin()

    def _notify(self, reason: str) -> None:
        for callback in list(self._subscribers):
            callback(reason, self.timers)

    def subscribe(self, callback: Callable[[str, Dict[str, dict]], None]) -> Callable[[], None]:
        """Register `callback(reason, timers)`; returns an unsubscribe function."""
        self._subscribers.append(callback)
        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    # Read model

    @property
    def room_id(self) -> Optional[str]:
        return self.membership.room_id

    @property
    def timers(self) -> Dict[str, dict]:
        with self._lock:
            return self.store.snapshot()

    # Lifecycle

    def connect(self) -> None:
        self.session.connect()

    def close(self) -> None:
        self.session.close()

    # Actions

    def join_room(self, room_id) -> bool:
        with self._lock:
            return self.membership.join(room_id)

    def leave_room(self) -> bool:
        with self._lock:
            left = self.membership.leave()
            if left:
                self._notify('leave')
            return left

    def create_timer(self) -> bool:
        with self._lock:
            return self.intents.create_timer()

    def resume(self, timer_id) -> bool:
        with self._lock:
            return self.intents.resume(timer_id)

    def stop(self, timer_id) -> bool:
        with self._lock:
            return self.intents.stop(timer_id)

    def reset(self, timer_id) -> bool:
        with self._lock:
            return self.intents.reset(timer_id)

    def delete(self, timer_id) -> bool:
        with self._lock:
            return self.intents.delete(timer_id)

    def edit_note(self, timer_id, note) -> bool:
        with self._lock:
            return self.intents.edit_note(timer_id, note)


__all__ = ['TimerClient', 'ConnectionSession', 'TimerProjectionStore']
