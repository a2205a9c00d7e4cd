from flask import Blueprint, jsonify
from roomtimers.models import registry


rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_id>/timers', methods=['GET'])
def get_room_timers(room_id):
    """Read-only snapshot of a room, in the same shape as `all_timers`."""
    snapshot = registry.room_snapshot(room_id)
    if snapshot is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(snapshot)
