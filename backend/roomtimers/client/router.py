"""Event routing between the session and the projection.

Inbound: one reducer per authority event name. Outbound: one event name and
payload shape per user action.
"""

import logging
from collections.abc import Mapping

from roomtimers.client import projection

logger = logging.getLogger(__name__)


def _snapshot(store, payload):
    return store.apply(projection.replace_all, payload if isinstance(payload, list) else [])


def _created(store, payload):
    return store.apply(projection.insert, payload.get('timerId'), payload.get('count'), payload.get('note'))


def _tick(store, payload):
    return store.apply(projection.patch_count, payload.get('timerId'), payload.get('count'))


def _status(store, payload):
    return store.apply(projection.patch_status, payload.get('timerId'), payload.get('isRunning'))


def _deleted(store, payload):
    # Deletion carries the bare timer id
    return store.apply(projection.remove, payload)


def _note(store, payload):
    return store.apply(projection.patch_note, payload.get('timerId'), payload.get('note'))


INBOUND = {
    'all_timers': _snapshot,
    'timer_created': _created,
    'timer_update': _tick,
    'timer_status': _status,
    'timer_deleted': _deleted,
    'note_updated': _note,
}

# Events whose payload is a {timerId, ...} object
_OBJECT_PAYLOADS = {'timer_created', 'timer_update', 'timer_status', 'note_updated'}

OUTBOUND = {
    'create': 'create_timer',
    'resume': 'resume_timer',
    'stop': 'stop_timer',
    'reset': 'reset_timer',
    'delete': 'delete_timer',
    'edit_note': 'update_note',
}


class EventRouter:
    def __init__(self, session, membership, store, on_change=None):
        self.session = session
        self.membership = membership
        self.store = store
        self.on_change = on_change

    def bind(self, wrap=None) -> None:
        """Subscribe one session handler per inbound event.

        `wrap` decorates each handler (the client uses it to serialize
        dispatch behind its lock).
        """
        for event in INBOUND:
            handler = self._handler_for(event)
            self.session.on(event, wrap(handler) if wrap else handler)

    def _handler_for(self, event):
        def handler(payload=None, *extra):
            self.dispatch(event, payload, *extra)
        handler.__name__ = f"on_{event}"
        return handler

    def dispatch(self, event: str, payload, *extra) -> bool:
        """Apply one inbound event; True when the projection changed.

        List and bare-id payloads (`all_timers`, `timer_deleted`) carry their
        room id as the next argument; object payloads carry `roomId`.
        """
        reducer = INBOUND.get(event)
        if reducer is None:
            return False
        # Counted even while not joined, so late answers are consumed
        if event == 'all_timers' and not self.membership.answer_snapshot():
            logger.debug(f"[stale] event={event} reason=superseded-join")
            return False
        if not self.membership.joined:
            logger.debug(f"[stale] event={event} reason=not-joined")
            return False
        if event in _OBJECT_PAYLOADS:
            if not isinstance(payload, Mapping):
                logger.debug(f"[malformed] event={event} payload={payload!r}")
                return False
            room_id = payload.get('roomId')
        else:
            room_id = extra[0] if extra else None
        if room_id is not None and not self.membership.is_current(room_id):
            logger.debug(f"[stale] event={event} room={room_id} current={self.membership.room_id}")
            return False
        changed = reducer(self.store, payload)
        if changed and self.on_change is not None:
            self.on_change(event)
        return changed

    def send_intent(self, action: str, **fields) -> bool:
        """Send the outbound event for `action` scoped to the joined room."""
        if not self.membership.joined:
            logger.debug(f"[intent-ignored] action={action} reason=not-joined")
            return False
        payload = {'roomId': self.membership.room_id}
        payload.update(fields)
        self.session.send(OUTBOUND[action], payload)
        return True
