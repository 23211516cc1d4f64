import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from tarama.errors import (
    GameInProgress,
    GameNotInProgress,
    IdentityMismatch,
    ManualEnclosureDisabled,
    NotHost,
    NotInRoom,
    NotYourTurn,
    RoomFull,
    RuleViolation,
)
from tarama.models import Phase, Player
from .board import Board
from .enclosure import EnclosureResult, apply_enclosure, evaluate_enclosure
from .geometry import Point
from .scoring import score_capture

MAX_PLAYERS = 2
CAPTURE_MODES = ('manual', 'surround')


@dataclass
class MoveResult:
    player: int
    point: Point
    captured: List[dict] = field(default_factory=list)
    score_delta: int = 0
    winner: Optional[int] = None

    def last_move(self):
        return {'row': self.point.y, 'col': self.point.x, 'player': self.player}


class Room:
    """One two-player game session.

    The room owns the authoritative state and enforces who may act when.
    It never talks to the network; the session layer turns return values into
    broadcasts and exceptions into private replies. Callers must hold the
    room's lock (see RoomRegistry.locked) around every method call.
    """

    def __init__(
        self,
        code: str,
        board_size: int = 20,
        win_length: int = 5,
        capture_mode: str = 'manual',
        clock: Callable[[], float] = time.time,
    ):
        if capture_mode not in CAPTURE_MODES:
            raise ValueError(f'unknown capture mode {capture_mode!r}')
        self.code = code
        self.board_size = board_size
        self.win_length = win_length
        self.capture_mode = capture_mode
        self.clock = clock
        self.players: List[Player] = []
        now = clock()
        self.created_at = now
        self.last_activity = now
        self.emptied_at: Optional[float] = None
        self._reset_game()

    def _reset_game(self) -> None:
        self.board = Board(self.board_size, self.win_length)
        self.phase = Phase.LOBBY
        self.turn = 0
        self.scores = [0, 0]
        self.winner: Optional[int] = None
        self.drawing: Optional[int] = None
        self.capture_history: List[dict] = []

    # ---- membership ----

    @property
    def is_empty(self) -> bool:
        return not self.players

    @property
    def is_full(self) -> bool:
        return len(self.players) >= MAX_PLAYERS

    @property
    def host(self) -> Optional[Player]:
        return next((p for p in self.players if p.is_host), None)

    def touch(self) -> None:
        self.last_activity = self.clock()

    def player_for(self, sid: str) -> Player:
        for p in self.players:
            if p.sid == sid:
                return p
        raise NotInRoom()

    def add_player(self, sid: str, name: str) -> Player:
        if any(p.sid == sid for p in self.players):
            raise RuleViolation('You are already in this room')
        if self.is_full:
            raise RoomFull()
        taken = {p.index for p in self.players}
        seat = min(i for i in range(MAX_PLAYERS) if i not in taken)
        player = Player(sid=sid, name=name, index=seat, is_host=self.host is None)
        self.players.append(player)
        self.players.sort(key=lambda p: p.index)
        self.emptied_at = None
        self.touch()
        return player

    def remove_player(self, sid: str) -> Player:
        player = self.player_for(sid)
        self.players.remove(player)
        if self.drawing == player.index:
            self.drawing = None
        if self.players:
            if player.is_host:
                self.players[0].is_host = True
        else:
            self.emptied_at = self.clock()
        self.touch()
        return player

    # ---- lobby ----

    def set_ready(self, sid: str, ready: bool) -> bool:
        """Set the caller's ready flag. Returns True if this started the game."""
        player = self.player_for(sid)
        if self.phase != Phase.LOBBY:
            raise GameInProgress()
        player.ready = ready
        self.touch()
        if len(self.players) == MAX_PLAYERS and all(p.ready for p in self.players):
            self._start_game()
            return True
        return False

    def toggle_ready(self, sid: str) -> bool:
        return self.set_ready(sid, not self.player_for(sid).ready)

    def _start_game(self) -> None:
        self._reset_game()
        self.phase = Phase.PLAYING

    def restart(self, sid: str) -> None:
        player = self.player_for(sid)
        if not player.is_host:
            raise NotHost()
        self._reset_game()
        for p in self.players:
            p.ready = False
        self.touch()

    # ---- turns ----

    def _require_turn(self, player: Player) -> None:
        if self.phase != Phase.PLAYING:
            raise GameNotInProgress()
        if player.index != self.turn:
            raise NotYourTurn()

    def _advance_turn(self) -> int:
        self.turn = 1 - self.turn
        self.drawing = None
        self.touch()
        return self.turn

    def make_move(self, sid: str, row: int, col: int, player_index: Optional[int] = None) -> MoveResult:
        player = self.player_for(sid)
        if player_index is not None and player_index != player.index:
            raise IdentityMismatch()
        self._require_turn(player)

        point = Point(col, row)
        self.board.place(point, player.index)
        result = MoveResult(player=player.index, point=point)

        if self.capture_mode == 'surround':
            opponent = 1 - player.index
            for cell in self.board.surround_capture(point, player.index):
                owner = self.board.get(cell)
                if self.board.disable(cell, owner):
                    result.captured.append({'x': cell.x, 'y': cell.y, 'player': owner})
                    if owner == opponent:
                        result.score_delta += 1
            if result.captured:
                score_capture(self, player.index, result.score_delta, result.captured, 'surround')

        winner = self.board.check_winner()
        if winner is not None:
            self.phase = Phase.ENDED
            self.winner = winner
            result.winner = winner
        self._advance_turn()
        return result

    def start_enclosure(self, sid: str) -> int:
        player = self.player_for(sid)
        self._require_turn(player)
        self.drawing = player.index
        self.touch()
        return player.index

    def finish_enclosure(self, sid: str, points) -> EnclosureResult:
        player = self.player_for(sid)
        if self.capture_mode != 'manual':
            raise ManualEnclosureDisabled()
        self._require_turn(player)
        result = evaluate_enclosure(self.board, points, player.index)
        apply_enclosure(self.board, result)
        score_capture(self, player.index, result.score_delta, result.enclosed, 'enclosure')
        self._advance_turn()
        return result

    def cancel_enclosure(self, sid: str) -> int:
        self._require_turn(self.player_for(sid))
        return self._advance_turn()

    def pass_turn(self, sid: str) -> int:
        self._require_turn(self.player_for(sid))
        return self._advance_turn()

    # ---- serialization ----

    def players_payload(self):
        return {'roomCode': self.code, 'players': [p.to_dict() for p in self.players]}

    def to_dict(self):
        board = self.board.to_dict()
        return {
            'roomCode': self.code,
            'phase': self.phase.value,
            'boardSize': board['size'],
            'board': board['cells'],
            'disabledPoints': board['disabledPoints'],
            'turn': self.turn,
            'scores': list(self.scores),
            'winner': self.winner,
            'drawing': self.drawing,
            'captureMode': self.capture_mode,
            'captures': len(self.capture_history),
            'players': [p.to_dict() for p in self.players],
        }
