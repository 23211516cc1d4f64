import logging
import secrets
import string
import threading
import time
from contextlib import ExitStack, contextmanager, suppress
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from tarama.errors import RoomNotFound
from .room import Room

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


def normalize_room_code(code: str) -> str:
    return (code or '').strip().upper()


def generate_room_code(taken, length: int = 6) -> str:
    """Generate a unique, short room code."""
    while True:
        code = ''.join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))
        if code not in taken:
            return code


class RoomRegistry:
    """Live rooms keyed by code, with one lock per room.

    ``_lock`` only guards the two maps (code -> room, sid -> code). Room state
    is guarded by the per-room lock handed out by ``locked``. When both are
    needed the room lock is taken first. Two room locks are only ever held
    together through ``locked_pair``.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        code_length: int = 6,
        board_size: int = 20,
        win_length: int = 5,
        capture_mode: str = 'manual',
        idle_grace_sec: float = 1800,
        max_lifetime_sec: float = 7200,
        delete_when_empty: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self.clock = clock
        self.code_length = code_length
        self.board_size = board_size
        self.win_length = win_length
        self.capture_mode = capture_mode
        self.idle_grace_sec = idle_grace_sec
        self.max_lifetime_sec = max_lifetime_sec
        self.delete_when_empty = delete_when_empty
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._rooms: Dict[str, Room] = {}
        self._room_locks: Dict[str, threading.RLock] = {}
        self._sid_to_code: Dict[str, str] = {}

    @classmethod
    def from_config(cls, config, logger=None) -> 'RoomRegistry':
        return cls(
            code_length=config.get('ROOM_CODE_LENGTH', 6),
            board_size=config.get('BOARD_SIZE', 20),
            win_length=config.get('WIN_LENGTH', 5),
            capture_mode=config.get('CAPTURE_MODE', 'manual'),
            idle_grace_sec=config.get('ROOM_IDLE_GRACE_SEC', 1800),
            max_lifetime_sec=config.get('ROOM_MAX_LIFETIME_SEC', 7200),
            delete_when_empty=config.get('DELETE_EMPTY_ROOMS_IMMEDIATELY', False),
            logger=logger,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, code) -> bool:
        with self._lock:
            return normalize_room_code(code) in self._rooms

    def codes(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    # ---- rooms ----

    def create(self, sid: str, player_name: str) -> Room:
        """Create a room with the caller as host and bind the caller to it."""
        with self._lock:
            code = generate_room_code(self._rooms, self.code_length)
            room = Room(
                code,
                board_size=self.board_size,
                win_length=self.win_length,
                capture_mode=self.capture_mode,
                clock=self.clock,
            )
            room.add_player(sid, player_name)
            self._rooms[code] = room
            self._room_locks[code] = threading.RLock()
            self._sid_to_code[sid] = code
        self.logger.info(f"[room-created] room={code} sid={sid}")
        return room

    def get(self, code: str) -> Room:
        """Unlocked lookup, for read-only peeks."""
        with self._lock:
            room = self._rooms.get(normalize_room_code(code))
        if room is None:
            raise RoomNotFound()
        return room

    @contextmanager
    def locked(self, code: str) -> Iterator[Room]:
        """Hold the room's lock for the duration of the block."""
        code = normalize_room_code(code)
        while True:
            with self._lock:
                lock = self._room_locks.get(code)
            if lock is None:
                raise RoomNotFound()
            with lock:
                with self._lock:
                    current = self._room_locks.get(code)
                    room = self._rooms.get(code)
                if current is lock:
                    yield room
                    return
            # reclaimed while we were waiting; the code may already name a new room

    @contextmanager
    def locked_pair(self, code: str, other: Optional[str]) -> Iterator[Room]:
        """Hold the locks of ``code`` and, if it is still live, ``other``.

        Locks are taken in code order so two connections swapping between the
        same pair of rooms cannot deadlock. Yields the room for ``code``.
        """
        code = normalize_room_code(code)
        other = normalize_room_code(other) if other else None
        room = None
        with ExitStack() as stack:
            for c in sorted({code, other} - {None}):
                if c == code:
                    room = stack.enter_context(self.locked(c))
                else:
                    with suppress(RoomNotFound):
                        stack.enter_context(self.locked(c))
            yield room

    def discard(self, code: str) -> None:
        """Forget a room. Callers must hold its lock."""
        with self._lock:
            self._rooms.pop(code, None)
            self._room_locks.pop(code, None)
            for sid in [s for s, c in self._sid_to_code.items() if c == code]:
                del self._sid_to_code[sid]

    # ---- connections ----

    def bind(self, sid: str, code: str) -> None:
        with self._lock:
            self._sid_to_code[sid] = normalize_room_code(code)

    def unbind(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._sid_to_code.pop(sid, None)

    def code_for(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._sid_to_code.get(sid)

    # ---- reclamation ----

    def expiry_reason(self, room: Room, now: float) -> Optional[str]:
        if room.is_empty:
            emptied = room.emptied_at if room.emptied_at is not None else room.last_activity
            if now - emptied > self.idle_grace_sec:
                return 'idle'
        if now - room.created_at > self.max_lifetime_sec:
            return 'expired'
        return None

    def sweep(self, now: Optional[float] = None) -> List[Tuple[str, str]]:
        """Delete idle and over-age rooms. Returns (code, reason) pairs."""
        now = self.clock() if now is None else now
        removed = []
        for code in self.codes():
            try:
                with self.locked(code) as room:
                    reason = self.expiry_reason(room, now)
                    if reason:
                        self.discard(code)
                        removed.append((code, reason))
            except RoomNotFound:
                continue
        return removed
