"""Session layer: routes parsed commands to rooms and fans results out.

Every state change happens inside ``RoomRegistry.locked`` and its broadcast is
sent before the lock is released, so clients in a room observe events in the
same order the room applied them.
"""

import logging
from typing import Protocol

from tarama.commands import (
    CancelEnclosure,
    CreateRoom,
    FinishEnclosure,
    JoinRoom,
    LeaveRoom,
    MakeMove,
    PassTurn,
    RestartGame,
    SetReady,
    StartEnclosure,
    ToggleReady,
    parse_command,
)
from tarama.errors import GameError, NotInRoom, RoomFull, RoomNotFound, RuleViolation
from .registry import RoomRegistry


class Transport(Protocol):
    def send(self, sid: str, event: str, payload) -> None: ...

    def broadcast(self, room_code: str, event: str, payload) -> None: ...

    def join(self, sid: str, room_code: str) -> None: ...

    def leave(self, sid: str, room_code: str) -> None: ...

    def close(self, room_code: str) -> None: ...


class GameSession:
    def __init__(self, registry: RoomRegistry, transport: Transport, logger=None):
        self.registry = registry
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self._handlers = {
            CreateRoom: self._create_room,
            JoinRoom: self._join_room,
            ToggleReady: self._toggle_ready,
            SetReady: self._set_ready,
            MakeMove: self._make_move,
            StartEnclosure: self._start_enclosure,
            FinishEnclosure: self._finish_enclosure,
            CancelEnclosure: self._cancel_enclosure,
            PassTurn: self._pass_turn,
            RestartGame: self._restart_game,
            LeaveRoom: self._leave_room,
        }

    # ---- entry points ----

    def handle(self, sid: str, event: str, data=None) -> None:
        """Validate and execute one inbound command for connection ``sid``."""
        try:
            command = parse_command(event, data)
            self._handlers[type(command)](sid, command)
        except GameError as exc:
            self.logger.info(f"[rejected] sid={sid} event={event} code={exc.code} reason={exc.message}")
            self._reject(sid, event, exc)
        except Exception:
            self.logger.exception(f"[dropped] sid={sid} event={event} unexpected error")

    def disconnect(self, sid: str) -> None:
        code = self.registry.code_for(sid)
        if not code:
            return
        try:
            self._leave(sid, code)
        except Exception:
            self.logger.exception(f"[dropped] sid={sid} event=disconnect unexpected error")

    def reclaim_rooms(self, now=None):
        """Run one reclamation sweep and tell any remaining clients."""
        removed = self.registry.sweep(now)
        for code, reason in removed:
            self.transport.broadcast(code, 'roomClosed', {'roomCode': code, 'reason': reason})
            self.transport.close(code)
            self.logger.info(f"[room-reclaimed] room={code} reason={reason}")
        return removed

    def _reject(self, sid: str, event: str, exc: GameError) -> None:
        if event == FinishEnclosure.event:
            self.transport.send(sid, 'enclosureFinished', {
                'success': False,
                'code': exc.code,
                'message': exc.message,
            })
            return
        payload = exc.to_dict()
        payload['event'] = event
        self.transport.send(sid, 'error', payload)

    # ---- membership ----

    def _create_room(self, sid: str, cmd: CreateRoom) -> None:
        self._leave_current(sid)
        room = self.registry.create(sid, cmd.player_name)
        self.transport.join(sid, room.code)
        self.transport.send(sid, 'roomCreated', {
            'roomCode': room.code,
            'isHost': True,
            'playerIndex': 0,
        })

    def _join_room(self, sid: str, cmd: JoinRoom) -> None:
        code = cmd.room_code
        current = self.registry.code_for(sid)
        if current == code:
            raise RuleViolation('You are already in this room')
        # The caller leaves their current room only once the target seat is held
        with self.registry.locked_pair(code, current) as room:
            if room.is_full:
                raise RoomFull()
            if current:
                self._leave_current(sid)
            player = room.add_player(sid, cmd.player_name)
            self.registry.bind(sid, code)
            self.transport.join(sid, code)
            self.transport.send(sid, 'roomJoined', {
                'roomCode': code,
                'isHost': player.is_host,
                'playerIndex': player.index,
                'state': room.to_dict(),
            })
            self.transport.broadcast(code, 'playersUpdate', room.players_payload())
        self.logger.info(f"[room-joined] room={code} sid={sid} seat={player.index}")

    def _leave_room(self, sid: str, cmd: LeaveRoom) -> None:
        if self.registry.code_for(sid) != cmd.room_code:
            raise NotInRoom()
        self._leave_current(sid)
        self.transport.send(sid, 'roomLeft', {'roomCode': cmd.room_code})

    def _leave_current(self, sid: str) -> None:
        code = self.registry.code_for(sid)
        if code:
            self._leave(sid, code)
            self.transport.leave(sid, code)

    def _leave(self, sid: str, code: str) -> None:
        try:
            with self.registry.locked(code) as room:
                room.remove_player(sid)
                self.registry.unbind(sid)
                if not room.is_empty:
                    self.transport.broadcast(code, 'playersUpdate', room.players_payload())
                    self.logger.info(f"[player-left] room={code} sid={sid} host={room.host.index}")
                elif self.registry.delete_when_empty:
                    self.registry.discard(code)
                    self.transport.close(code)
                    self.logger.info(f"[room-deleted] room={code} empty")
                else:
                    self.logger.info(
                        f"[room-empty] room={code} reclaim_after={self.registry.idle_grace_sec}s"
                    )
        except RoomNotFound:
            # Room was reclaimed underneath this connection
            self.registry.unbind(sid)

    # ---- lobby ----

    def _toggle_ready(self, sid: str, cmd: ToggleReady) -> None:
        with self.registry.locked(cmd.room_code) as room:
            started = room.toggle_ready(sid)
            self._after_ready(room, started)

    def _set_ready(self, sid: str, cmd: SetReady) -> None:
        with self.registry.locked(cmd.room_code) as room:
            started = room.set_ready(sid, cmd.ready)
            self._after_ready(room, started)

    def _after_ready(self, room, started: bool) -> None:
        self.transport.broadcast(room.code, 'playersUpdate', room.players_payload())
        if started:
            self.transport.broadcast(room.code, 'gameStarted', room.to_dict())
            self.logger.info(f"[game-started] room={room.code}")

    def _restart_game(self, sid: str, cmd: RestartGame) -> None:
        with self.registry.locked(cmd.room_code) as room:
            room.restart(sid)
            self.transport.broadcast(room.code, 'gameRestarted', room.to_dict())
            self.transport.broadcast(room.code, 'playersUpdate', room.players_payload())
        self.logger.info(f"[game-restarted] room={cmd.room_code} sid={sid}")

    # ---- play ----

    def _make_move(self, sid: str, cmd: MakeMove) -> None:
        with self.registry.locked(cmd.room_code) as room:
            result = room.make_move(sid, cmd.row, cmd.col, cmd.player_index)
            payload = room.to_dict()
            payload['lastMove'] = result.last_move()
            payload['capturedPoints'] = result.captured
            payload['scoreDelta'] = result.score_delta
            self.transport.broadcast(room.code, 'gameUpdate', payload)
            if result.winner is not None:
                self.logger.info(f"[game-ended] room={room.code} winner={result.winner} scores={room.scores}")

    def _start_enclosure(self, sid: str, cmd: StartEnclosure) -> None:
        with self.registry.locked(cmd.room_code) as room:
            player = room.start_enclosure(sid)
            self.transport.broadcast(room.code, 'enclosureStarted', {'player': player, 'turn': room.turn})

    def _finish_enclosure(self, sid: str, cmd: FinishEnclosure) -> None:
        with self.registry.locked(cmd.room_code) as room:
            result = room.finish_enclosure(sid, cmd.path())
            self.transport.broadcast(room.code, 'enclosureFinished', {
                'success': True,
                'player': result.player,
                'path': [p.to_dict() for p in result.path],
                'disabledPoints': result.disabled_points(),
                'scoreDelta': result.score_delta,
                'scores': list(room.scores),
                'state': room.to_dict(),
            })
        self.logger.info(
            f"[enclosure] room={cmd.room_code} player={result.player} "
            f"disabled={len(result.enclosed)} score_delta={result.score_delta}"
        )

    def _cancel_enclosure(self, sid: str, cmd: CancelEnclosure) -> None:
        with self.registry.locked(cmd.room_code) as room:
            turn = room.cancel_enclosure(sid)
            self.transport.broadcast(room.code, 'enclosureCancelled', {'turn': turn})

    def _pass_turn(self, sid: str, cmd: PassTurn) -> None:
        with self.registry.locked(cmd.room_code) as room:
            turn = room.pass_turn(sid)
            self.transport.broadcast(room.code, 'turnPassed', {'turn': turn})
