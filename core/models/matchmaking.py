from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto


class MatchStatus(str, Enum):
    """Lifecycle of a 1v1 trivia match"""

    WAITING = "waiting"  # Seat 1 taken, waiting for an opponent
    ACTIVE = "active"  # Both seats taken, seat 1 moves first
    FINISHED = "finished"  # Set by turn progression, never by matchmaking


class SeatClaim(Enum):
    """Outcome of trying to sit a player in a match"""

    SEATED = auto()  # Row inserted
    TAKEN = auto()  # Uniqueness constraint rejected the insert


@dataclass
class MatchRecord:
    """Represents a row of the matches table"""

    id: str
    match_code: str
    level: str
    status: MatchStatus
    created_at: datetime
    current_player_id: str | None = None
    started_at: datetime | None = None


@dataclass
class PlayerRecord:
    """Represents a row of the players table"""

    id: str
    match_id: str
    user_id: str
    player_number: int
