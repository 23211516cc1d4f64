import os


def _env_bool(name, default='0'):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ALLOWED_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ALLOWED_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000',
        ).split(',') if o.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Board geometry
    BOARD_SIZE = int(os.environ.get('BOARD_SIZE', '20'))
    WIN_LENGTH = int(os.environ.get('WIN_LENGTH', '5'))
    # 'manual' (player-drawn loops) or 'surround' (automatic capture on every move)
    CAPTURE_MODE = os.environ.get('CAPTURE_MODE', 'manual')
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    # Room reclamation (seconds)
    ROOM_IDLE_GRACE_SEC = int(os.environ.get('ROOM_IDLE_GRACE_SEC', '1800'))
    ROOM_MAX_LIFETIME_SEC = int(os.environ.get('ROOM_MAX_LIFETIME_SEC', '7200'))
    ROOM_SWEEP_INTERVAL_SEC = int(os.environ.get('ROOM_SWEEP_INTERVAL_SEC', '600'))
    DELETE_EMPTY_ROOMS_IMMEDIATELY = _env_bool('DELETE_EMPTY_ROOMS_IMMEDIATELY')
    # Optional: heartbeat interval for sweeper logs (sec). 0 disables.
    SWEEP_HEARTBEAT_SEC = int(os.environ.get('SWEEP_HEARTBEAT_SEC', '0'))
