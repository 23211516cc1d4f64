from flask import current_app, request
from flask_socketio import emit

from tarama import socketio
from tarama.commands import COMMANDS


class SocketIOTransport:
    """Delivers session-layer events over a Flask-SocketIO namespace.

    Socket.IO rooms are named after game room codes, so a broadcast reaches
    every connection that joined that game.
    """

    def __init__(self, sio, namespace: str = '/ws'):
        self.sio = sio
        self.namespace = namespace

    def send(self, sid: str, event: str, payload) -> None:
        self.sio.emit(event, payload, to=sid, namespace=self.namespace)

    def broadcast(self, room_code: str, event: str, payload) -> None:
        self.sio.emit(event, payload, to=room_code, namespace=self.namespace)

    def join(self, sid: str, room_code: str) -> None:
        self.sio.server.enter_room(sid, room_code, namespace=self.namespace)

    def leave(self, sid: str, room_code: str) -> None:
        self.sio.server.leave_room(sid, room_code, namespace=self.namespace)

    def close(self, room_code: str) -> None:
        self.sio.close_room(room_code, namespace=self.namespace)


def _session():
    return current_app.extensions['tarama']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected', 'sid': _get_sid()})


def handle_disconnect(*args):
    _session().disconnect(_get_sid())


def handle_ping(data=None):
    emit('pong', data or {})


def _command_handler(event: str):
    def handler(data=None):
        _session().handle(_get_sid(), event, data)
    handler.__name__ = f'handle_{event}'
    return handler


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``.

    Every game command is routed through the app's GameSession.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
    for event in COMMANDS:
        socketio.on_event(event, _command_handler(event), namespace=namespace)
