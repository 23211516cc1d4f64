"""Pydantic models for inbound Socket.IO commands.

One model per event name; ``parse_command`` is the only way payloads reach
the session layer, so room logic never sees a missing or mistyped field.
Keys are camelCase on the wire and snake_case in Python.
"""
from typing import Annotated, ClassVar, Dict, List, Optional, Type, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StringConstraints

from tarama.errors import ValidationError

RoomCode = Annotated[str, StringConstraints(strip_whitespace=True, to_upper=True, min_length=1, max_length=16)]
PlayerName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=32)]
Coordinate = Annotated[StrictInt, Field(ge=0)]


class Command(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore', frozen=True)

    event: ClassVar[str]
    # Older clients send some commands as a bare string instead of an object
    scalar_field: ClassVar[Optional[str]] = None


class RoomCommand(Command):
    room_code: RoomCode = Field(alias='roomCode')

    scalar_field: ClassVar[Optional[str]] = 'roomCode'


class PointIn(BaseModel):
    x: Coordinate
    y: Coordinate


class CreateRoom(Command):
    event: ClassVar[str] = 'createRoom'
    scalar_field: ClassVar[Optional[str]] = 'playerName'

    player_name: PlayerName = Field(alias='playerName')


class JoinRoom(RoomCommand):
    event: ClassVar[str] = 'joinRoom'
    scalar_field: ClassVar[Optional[str]] = None

    player_name: PlayerName = Field(alias='playerName')


class ToggleReady(RoomCommand):
    event: ClassVar[str] = 'toggleReady'


class SetReady(RoomCommand):
    event: ClassVar[str] = 'setReady'
    scalar_field: ClassVar[Optional[str]] = None

    ready: StrictBool


class MakeMove(RoomCommand):
    event: ClassVar[str] = 'makeMove'
    scalar_field: ClassVar[Optional[str]] = None

    row: Coordinate
    col: Coordinate
    player_index: Optional[Annotated[StrictInt, Field(ge=0, le=1)]] = Field(default=None, alias='playerIndex')


class StartEnclosure(RoomCommand):
    event: ClassVar[str] = 'startEnclosure'


class FinishEnclosure(RoomCommand):
    event: ClassVar[str] = 'finishEnclosure'
    scalar_field: ClassVar[Optional[str]] = None

    selected_points: List[PointIn] = Field(alias='selectedPoints', max_length=1024)

    def path(self):
        return [(p.x, p.y) for p in self.selected_points]


class CancelEnclosure(RoomCommand):
    event: ClassVar[str] = 'cancelEnclosure'


class PassTurn(RoomCommand):
    event: ClassVar[str] = 'passTurn'


class RestartGame(RoomCommand):
    event: ClassVar[str] = 'restartGame'


class LeaveRoom(RoomCommand):
    event: ClassVar[str] = 'leaveRoom'


AnyCommand = Union[
    CreateRoom, JoinRoom, ToggleReady, SetReady, MakeMove, StartEnclosure,
    FinishEnclosure, CancelEnclosure, PassTurn, RestartGame, LeaveRoom,
]

COMMANDS: Dict[str, Type[Command]] = {
    model.event: model for model in AnyCommand.__args__
}


def _describe(exc: pydantic.ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = '.'.join(str(p) for p in err.get('loc', ())) or 'payload'
        parts.append(f"{loc}: {err.get('msg')}")
    return '; '.join(parts)


def parse_command(event: str, data) -> Command:
    model = COMMANDS.get(event)
    if model is None:
        raise ValidationError(f'Unknown command {event!r}')
    if isinstance(data, str) and model.scalar_field:
        data = {model.scalar_field: data}
    if not isinstance(data, dict):
        raise ValidationError(f'{event} payload must be an object')
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe(exc)) from exc
