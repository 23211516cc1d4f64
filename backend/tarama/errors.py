"""
Exceptions raised by the game core.

Hierarchy:
- GameError (base; carries a stable ``code`` for client replies)
  - ValidationError (malformed command or out-of-bounds point)
  - RuleViolation (legal payload, illegal action in the current state)
  - NotFound

Every GameError is answered privately to the caller and leaves room state
untouched. Anything else escaping a handler is a bug and gets logged.
"""


class GameError(Exception):
    """Base exception for rejected commands."""
    code = 'error'
    default_message = 'Request rejected'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self):
        return {'code': self.code, 'message': self.message}


class ValidationError(GameError):
    code = 'validation_error'
    default_message = 'Malformed command'


# =========================
# Rule violations
# =========================

class RuleViolation(GameError):
    code = 'rule_violation'
    default_message = 'That action is not allowed right now'


class NotYourTurn(RuleViolation):
    code = 'not_your_turn'
    default_message = 'It is not your turn'


class CellOccupied(RuleViolation):
    code = 'cell_occupied'
    default_message = 'That cell is already occupied'


class CellDisabled(RuleViolation):
    code = 'cell_disabled'
    default_message = 'That cell has been removed from play'


class NotHost(RuleViolation):
    code = 'not_host'
    default_message = 'Only the host can do that'


class IdentityMismatch(RuleViolation):
    code = 'identity_mismatch'
    default_message = 'Player index does not match this connection'


class NotInRoom(RuleViolation):
    code = 'not_in_room'
    default_message = 'You are not a player in this room'


class RoomFull(RuleViolation):
    code = 'room_full'
    default_message = 'Room is full'


class GameNotInProgress(RuleViolation):
    code = 'game_not_in_progress'
    default_message = 'The game is not in progress'


class GameInProgress(RuleViolation):
    code = 'game_in_progress'
    default_message = 'The game has already started'


class InvalidEnclosure(RuleViolation):
    code = 'invalid_enclosure'
    default_message = 'Invalid enclosure'


class ManualEnclosureDisabled(RuleViolation):
    code = 'manual_enclosure_disabled'
    default_message = 'Manual enclosures are disabled in this room'


# =========================
# Lookups
# =========================

class NotFound(GameError):
    code = 'not_found'
    default_message = 'Not found'


class RoomNotFound(NotFound):
    code = 'room_not_found'
    default_message = 'Room not found'
