from flask import Blueprint, jsonify
from roomtimers.models import registry

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the room timer server!', 'rooms': len(registry.room_ids())})
