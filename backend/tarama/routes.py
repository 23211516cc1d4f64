from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({
        'status': 'OK',
        'message': 'Tarama game server is running',
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })


@main.route('/health')
def health():
    session = current_app.extensions['tarama']
    return jsonify({'status': 'healthy', 'rooms': len(session.registry)})
