from dataclasses import dataclass
from enum import Enum


class Phase(str, Enum):
    LOBBY = 'lobby'
    PLAYING = 'playing'
    ENDED = 'ended'


@dataclass
class Player:
    sid: str
    name: str
    index: int
    ready: bool = False
    is_host: bool = False

    def to_dict(self):
        return {
            'name': self.name,
            'playerIndex': self.index,
            'ready': self.ready,
            'isHost': self.is_host,
        }
