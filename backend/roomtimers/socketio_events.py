from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from roomtimers.models import registry
from typing import Dict, Optional, Tuple


# sid -> room id the socket last joined
_sid_to_room: Dict[str, str] = {}


def room_channel(room_id: str) -> str:
    return f"room:{room_id}"


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _room_id_from(data) -> Optional[str]:
    # join_room/leave_room carry the bare room id; accept {roomId} too
    if isinstance(data, dict):
        data = data.get('roomId')
    if isinstance(data, (str, int)) and str(data):
        return str(data)
    return None


def _timer_target(data) -> Tuple[Optional[str], Optional[str]]:
    data = data if isinstance(data, dict) else {}
    room_id = _room_id_from(data)
    timer_id = data.get('timerId')
    return room_id, (str(timer_id) if timer_id else None)


def _reject(message: str, tag: str, **fields) -> None:
    detail = ' '.join(f"{k}={v}" for k, v in fields.items())
    current_app.logger.info(f"[{tag}-reject] {message} {detail}".rstrip())
    emit('error', {'message': message})


def _broadcast(event: str, payload, room_id: str, *extra) -> None:
    emit(event, (payload, *extra) if extra else payload, to=room_channel(room_id))


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    room_id = _sid_to_room.pop(_get_sid(), None)
    current_app.logger.info(f"[disconnect] sid={_get_sid()} room={room_id}")


def handle_join_room(data):
    room_id = _room_id_from(data)
    if not room_id:
        _reject('roomId is required', 'join')
        return
    previous = _sid_to_room.get(_get_sid())
    if previous and previous != room_id:
        leave_room(room_channel(previous))
    join_room(room_channel(room_id))
    _sid_to_room[_get_sid()] = room_id
    timers = registry.ensure_room(room_id)
    current_app.logger.info(f"[join] sid={_get_sid()} room={room_id} timers={len(timers)}")
    # Snapshot goes to the joining socket only; the room id rides as a second argument
    emit('all_timers', (timers, room_id))


def handle_leave_room(data):
    room_id = _room_id_from(data)
    if not room_id:
        _reject('roomId is required', 'leave')
        return
    leave_room(room_channel(room_id))
    if _sid_to_room.get(_get_sid()) == room_id:
        _sid_to_room.pop(_get_sid(), None)
    current_app.logger.info(f"[leave] sid={_get_sid()} room={room_id}")


def handle_create_timer(data):
    room_id = _room_id_from(data)
    if not room_id:
        _reject('roomId is required', 'create')
        return
    timer = registry.create_timer(room_id)
    if timer is None:
        _reject('room not found', 'create', room=room_id)
        return
    current_app.logger.info(f"[create] room={room_id} timer={timer['timerId']}")
    _broadcast('timer_created', {
        'roomId': room_id,
        'timerId': timer['timerId'],
        'count': timer['count'],
        'note': timer['note'],
    }, room_id)


def _set_running(data, is_running: bool, tag: str):
    room_id, timer_id = _timer_target(data)
    if not room_id or not timer_id:
        _reject('roomId and timerId are required', tag)
        return
    timer = registry.set_running(room_id, timer_id, is_running)
    if timer is None:
        _reject('timer not found', tag, room=room_id, timer=timer_id)
        return
    current_app.logger.info(f"[{tag}] room={room_id} timer={timer_id} count={timer['count']}")
    _broadcast('timer_status', {'roomId': room_id, 'timerId': timer_id, 'isRunning': is_running}, room_id)


def handle_resume_timer(data):
    _set_running(data, True, 'resume')


def handle_stop_timer(data):
    _set_running(data, False, 'stop')


def handle_reset_timer(data):
    room_id, timer_id = _timer_target(data)
    if not room_id or not timer_id:
        _reject('roomId and timerId are required', 'reset')
        return
    timer = registry.reset_timer(room_id, timer_id)
    if timer is None:
        _reject('timer not found', 'reset', room=room_id, timer=timer_id)
        return
    current_app.logger.info(f"[reset] room={room_id} timer={timer_id}")
    _broadcast('timer_update', {'roomId': room_id, 'timerId': timer_id, 'count': timer['count']}, room_id)


def handle_delete_timer(data):
    room_id, timer_id = _timer_target(data)
    if not room_id or not timer_id:
        _reject('roomId and timerId are required', 'delete')
        return
    if not registry.delete_timer(room_id, timer_id):
        _reject('timer not found', 'delete', room=room_id, timer=timer_id)
        return
    current_app.logger.info(f"[delete] room={room_id} timer={timer_id}")
    # Deletion carries the bare timer id, then the room id
    _broadcast('timer_deleted', timer_id, room_id, room_id)


def handle_update_note(data):
    room_id, timer_id = _timer_target(data)
    note = data.get('note') if isinstance(data, dict) else None
    if not room_id or not timer_id:
        _reject('roomId and timerId are required', 'note')
        return
    timer = registry.set_note(room_id, timer_id, '' if note is None else str(note))
    if timer is None:
        _reject('timer not found', 'note', room=room_id, timer=timer_id)
        return
    current_app.logger.info(f"[note] room={room_id} timer={timer_id} length={len(timer['note'])}")
    # Echoed to the sender too, so its optimistic edit converges
    _broadcast('note_updated', {'roomId': room_id, 'timerId': timer_id, 'note': timer['note']}, room_id)


def register_socketio_handlers(socketio, namespace: str = '/') -> None:
    """Register the authority's Socket.IO intent handlers on `namespace`."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join_room', handle_join_room, namespace=namespace)
    socketio.on_event('leave_room', handle_leave_room, namespace=namespace)
    socketio.on_event('create_timer', handle_create_timer, namespace=namespace)
    socketio.on_event('resume_timer', handle_resume_timer, namespace=namespace)
    socketio.on_event('stop_timer', handle_stop_timer, namespace=namespace)
    socketio.on_event('reset_timer', handle_reset_timer, namespace=namespace)
    socketio.on_event('delete_timer', handle_delete_timer, namespace=namespace)
    socketio.on_event('update_note', handle_update_note, namespace=namespace)
