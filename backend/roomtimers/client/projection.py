"""Timer projection: the client's local view of the joined room's timers.

Each inbound authority event has one reducer here. Reducers are pure: they
take the current mapping and return the next one, touching only the fields
their event is allowed to touch. A reducer that has nothing to do returns
the mapping it was given (the same object), so callers can detect no-ops
with an identity check.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

Projection = Mapping[str, 'TimerState']


@dataclass(frozen=True)
class TimerState:
    timer_id: str
    count: float = 0.0
    is_running: bool = False
    note: str = ''

    def to_dict(self):
        return {
            'count': self.count,
            'isRunning': self.is_running,
            'note': self.note,
        }


def coerce_count(value) -> Optional[float]:
    """Parse a wire count; None when it is not a finite number."""
    if isinstance(value, bool):
        return None
    try:
        count = float(value)
    except (TypeError, ValueError):
        return None
    if count != count or count in (float('inf'), float('-inf')):
        return None
    return count


def coerce_note(value) -> str:
    return '' if value is None else str(value)


def _timer_id(value) -> Optional[str]:
    if value is None or value == '':
        return None
    return str(value)


def timer_from_payload(payload) -> Optional[TimerState]:
    if not isinstance(payload, Mapping):
        return None
    timer_id = _timer_id(payload.get('timerId'))
    if timer_id is None:
        return None
    count = coerce_count(payload.get('count'))
    return TimerState(
        timer_id=timer_id,
        count=0.0 if count is None else count,
        is_running=bool(payload.get('isRunning') or False),
        note=coerce_note(payload.get('note')),
    )


def replace_all(projection: Projection, timer_list) -> Dict[str, TimerState]:
    """Wholesale replacement from a join snapshot."""
    loaded: Dict[str, TimerState] = {}
    for payload in timer_list or []:
        timer = timer_from_payload(payload)
        if timer is None:
            logger.debug(f"[snapshot-skip] malformed entry={payload!r}")
            continue
        loaded[timer.timer_id] = timer
    return loaded


def insert(projection: Projection, timer_id, count=0.0, note=None) -> Projection:
    """Upsert a freshly created timer; it always starts stopped."""
    timer_id = _timer_id(timer_id)
    if timer_id is None:
        return projection
    parsed = coerce_count(count)
    updated = dict(projection)
    updated[timer_id] = TimerState(
        timer_id=timer_id,
        count=0.0 if parsed is None else parsed,
        is_running=False,
        note=coerce_note(note),
    )
    return updated


def _patch(projection: Projection, timer_id, **fields) -> Projection:
    timer_id = _timer_id(timer_id)
    current = projection.get(timer_id) if timer_id is not None else None
    if current is None:
        return projection
    updated = dict(projection)
    updated[timer_id] = replace(current, **fields)
    return updated


def patch_count(projection: Projection, timer_id, count) -> Projection:
    parsed = coerce_count(count)
    if parsed is None:
        logger.debug(f"[count-skip] timer={timer_id} count={count!r}")
        return projection
    return _patch(projection, timer_id, count=parsed)


def patch_status(projection: Projection, timer_id, is_running) -> Projection:
    return _patch(projection, timer_id, is_running=bool(is_running))


def patch_note(projection: Projection, timer_id, note) -> Projection:
    return _patch(projection, timer_id, note=coerce_note(note))


def remove(projection: Projection, timer_id) -> Projection:
    timer_id = _timer_id(timer_id)
    if timer_id is None or timer_id not in projection:
        return projection
    updated = dict(projection)
    del updated[timer_id]
    return updated


class TimerProjectionStore:
    """Holds the current projection and applies reducers to it."""

    def __init__(self, timers: Optional[Iterable[TimerState]] = None):
        self._timers: Projection = {t.timer_id: t for t in (timers or [])}

    def __contains__(self, timer_id):
        return timer_id in self._timers

    def __len__(self):
        return len(self._timers)

    def get(self, timer_id) -> Optional[TimerState]:
        return self._timers.get(timer_id)

    @property
    def timers(self) -> Projection:
        return self._timers

    def apply(self, reducer, *args) -> bool:
        """Run `reducer` over the projection; True when something changed."""
        updated = reducer(self._timers, *args)
        if updated is self._timers:
            return False
        self._timers = updated
        return True

    def clear(self) -> bool:
        if not self._timers:
            return False
        self._timers = {}
        return True

    def snapshot(self) -> Dict[str, dict]:
        return {timer_id: t.to_dict() for timer_id, t in self._timers.items()}
