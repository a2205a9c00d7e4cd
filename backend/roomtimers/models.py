import secrets
import threading
from typing import Dict, List, Optional, Tuple


def generate_timer_id(length=8):
    """Generate a short hex id, unique within its room."""
    return secrets.token_hex(length // 2)


class Timer:
    def __init__(self, timer_id, count=0.0, is_running=False, note=''):
        self.timer_id = timer_id
        self.count = float(count)
        self.is_running = bool(is_running)
        self.note = note

    def to_dict(self):
        return {
            'timerId': self.timer_id,
            'count': round(self.count, 1),
            'isRunning': self.is_running,
            'note': self.note,
        }


class Room:
    def __init__(self, room_id):
        self.room_id = room_id
        self.timers: Dict[str, Timer] = {}

    def new_timer(self) -> Timer:
        timer_id = generate_timer_id()
        while timer_id in self.timers:
            timer_id = generate_timer_id()
        timer = Timer(timer_id)
        self.timers[timer_id] = timer
        return timer

    def to_dict(self):
        return {
            'roomId': self.room_id,
            'timers': [t.to_dict() for t in self.timers.values()],
        }


class RoomRegistry:
    """In-memory rooms and their timers; the single writer of timer truth.

    Every method takes the registry lock, so socket handlers and the ticker
    can call in from different threads. Methods return plain dicts (wire
    shape) rather than live objects.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def clear(self) -> None:
        with self._lock:
            self._rooms.clear()

    def ensure_room(self, room_id: str) -> List[dict]:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                room = self._rooms[room_id] = Room(room_id)
            return [t.to_dict() for t in room.timers.values()]

    def room_snapshot(self, room_id: str) -> Optional[dict]:
        with self._lock:
            room = self._rooms.get(room_id)
            return room.to_dict() if room else None

    def room_ids(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def create_timer(self, room_id: str) -> Optional[dict]:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return None
            return room.new_timer().to_dict()

    def _timer(self, room_id, timer_id) -> Optional[Timer]:
        room = self._rooms.get(room_id)
        if room is None:
            return None
        return room.timers.get(timer_id)

    def set_running(self, room_id: str, timer_id: str, is_running: bool) -> Optional[dict]:
        with self._lock:
            timer = self._timer(room_id, timer_id)
            if timer is None:
                return None
            timer.is_running = is_running
            return timer.to_dict()

    def reset_timer(self, room_id: str, timer_id: str) -> Optional[dict]:
        with self._lock:
            timer = self._timer(room_id, timer_id)
            if timer is None:
                return None
            timer.count = 0.0
            return timer.to_dict()

    def delete_timer(self, room_id: str, timer_id: str) -> bool:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None or timer_id not in room.timers:
                return False
            del room.timers[timer_id]
            return True

    def set_note(self, room_id: str, timer_id: str, note: str) -> Optional[dict]:
        with self._lock:
            timer = self._timer(room_id, timer_id)
            if timer is None:
                return None
            timer.note = note
            return timer.to_dict()

    def advance_running(self, elapsed: float) -> List[Tuple[str, dict]]:
        """Add `elapsed` seconds to every running timer.

        Returns (room_id, timer dict) pairs for the timers that moved.
        """
        advanced = []
        with self._lock:
            for room in self._rooms.values():
                for timer in room.timers.values():
                    if not timer.is_running:
                        continue
                    timer.count += elapsed
                    advanced.append((room.room_id, timer.to_dict()))
        return advanced


registry = RoomRegistry()
