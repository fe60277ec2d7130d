from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from core.config import Settings
from core.models.matchmaking import MatchRecord, MatchStatus, PlayerRecord, SeatClaim


class App(ABC):
    settings: Settings

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @abstractmethod
    def run(self) -> None:
        raise NotImplementedError


class MatchStore(ABC):
    """
    Row store holding the matches and players tables.

    Every method is a network round trip in production; implementations raise
    ``StoreError`` for any failure that is not one of the typed outcomes below.
    """

    async def connect(self) -> None:
        return None

    async def disconnect(self) -> None:
        return None

    @abstractmethod
    async def list_waiting_matches(self, level: str, limit: int) -> list[MatchRecord]:
        """Waiting matches of ``level``, oldest first."""
        raise NotImplementedError

    @abstractmethod
    async def list_players(self, match_id: str) -> list[PlayerRecord]:
        """Players of a match ordered by seat."""
        raise NotImplementedError

    @abstractmethod
    async def claim_seat(self, match_id: str, user_id: str, player_number: int) -> SeatClaim:
        """Insert a player row; ``SeatClaim.TAKEN`` if a uniqueness constraint rejects it."""
        raise NotImplementedError

    @abstractmethod
    async def activate_match(
        self, match_id: str, current_player_id: str, started_at: datetime
    ) -> MatchRecord:
        raise NotImplementedError

    @abstractmethod
    async def create_waiting_match(
        self, match_code: str, level: str, creator_id: str
    ) -> MatchRecord | None:
        """
        Create a waiting match with ``creator_id`` on seat 1 in one atomic write.

        Returns None when ``match_code`` is already used by another match.
        """
        raise NotImplementedError

    @abstractmethod
    async def create_private_match(
        self, match_code: str, level: str, creator_id: str, started_at: datetime
    ) -> MatchRecord | None:
        """
        Create an active match whose only seat is the creator's, who also holds
        the turn. It never shows up in ``list_waiting_matches``; a friend joins
        it by code. Returns None on a ``match_code`` collision.
        """
        raise NotImplementedError

    @abstractmethod
    async def find_match(self, match_id: str) -> MatchRecord | None:
        raise NotImplementedError

    @abstractmethod
    async def find_match_by_code(
        self, match_code: str, statuses: Iterable[MatchStatus]
    ) -> MatchRecord | None:
        raise NotImplementedError

    @abstractmethod
    async def delete_orphaned_matches(self, older_than: datetime) -> int:
        """Delete waiting matches without players created before ``older_than``."""
        raise NotImplementedError
