import asyncio
import logging
import uuid
from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, datetime

from core.abstract import MatchStore
from core.errors import StoreError
from core.models.matchmaking import MatchRecord, MatchStatus, PlayerRecord, SeatClaim

logger = logging.getLogger(__name__)


class MemoryMatchStore(MatchStore):
    """
    In-process match store with the same uniqueness rules as the database.

    Each operation yields to the event loop first, so concurrent requests
    interleave between store calls the way they would over the network.
    """

    def __init__(self) -> None:
        # match_id -> row, in insertion order
        self.matches: dict[str, MatchRecord] = {}
        # player rows, unique on (match_id, player_number) and (match_id, user_id)
        self.players: list[PlayerRecord] = []

    async def connect(self) -> None:
        logger.info("Using in-memory match store; data is lost on restart")

    async def list_waiting_matches(self, level: str, limit: int) -> list[MatchRecord]:
        await asyncio.sleep(0)
        waiting = [
            m for m in self.matches.values() if m.status == MatchStatus.WAITING and m.level == level
        ]
        waiting.sort(key=lambda m: m.created_at)
        return [replace(m) for m in waiting[:limit]]

    async def list_players(self, match_id: str) -> list[PlayerRecord]:
        await asyncio.sleep(0)
        seated = [p for p in self.players if p.match_id == match_id]
        return [replace(p) for p in sorted(seated, key=lambda p: p.player_number)]

    async def claim_seat(self, match_id: str, user_id: str, player_number: int) -> SeatClaim:
        await asyncio.sleep(0)
        if match_id not in self.matches:
            raise StoreError(f"Foreign key violation: match {match_id} does not exist")
        if not self._seat_free(match_id, user_id, player_number):
            return SeatClaim.TAKEN
        self.players.append(
            PlayerRecord(
                id=str(uuid.uuid4()),
                match_id=match_id,
                user_id=user_id,
                player_number=player_number,
            )
        )
        return SeatClaim.SEATED

    async def activate_match(
        self, match_id: str, current_player_id: str, started_at: datetime
    ) -> MatchRecord:
        await asyncio.sleep(0)
        match = self.matches.get(match_id)
        if match is None:
            raise StoreError(f"Match {match_id} vanished before activation")
        match.status = MatchStatus.ACTIVE
        match.current_player_id = current_player_id
        match.started_at = started_at
        return replace(match)

    async def create_waiting_match(
        self, match_code: str, level: str, creator_id: str
    ) -> MatchRecord | None:
        await asyncio.sleep(0)
        match = MatchRecord(
            id=str(uuid.uuid4()),
            match_code=match_code,
            level=level,
            status=MatchStatus.WAITING,
            created_at=datetime.now(UTC),
        )
        return self._insert_with_creator(match, creator_id)

    async def create_private_match(
        self, match_code: str, level: str, creator_id: str, started_at: datetime
    ) -> MatchRecord | None:
        await asyncio.sleep(0)
        match = MatchRecord(
            id=str(uuid.uuid4()),
            match_code=match_code,
            level=level,
            status=MatchStatus.ACTIVE,
            created_at=datetime.now(UTC),
            current_player_id=creator_id,
            started_at=started_at,
        )
        return self._insert_with_creator(match, creator_id)

    def _insert_with_creator(self, match: MatchRecord, creator_id: str) -> MatchRecord | None:
        if any(m.match_code == match.match_code for m in self.matches.values()):
            return None
        self.matches[match.id] = match
        self.players.append(
            PlayerRecord(id=str(uuid.uuid4()), match_id=match.id, user_id=creator_id, player_number=1)
        )
        return replace(match)

    async def find_match(self, match_id: str) -> MatchRecord | None:
        await asyncio.sleep(0)
        match = self.matches.get(match_id)
        return replace(match) if match else None

    async def find_match_by_code(
        self, match_code: str, statuses: Iterable[MatchStatus]
    ) -> MatchRecord | None:
        await asyncio.sleep(0)
        allowed = set(statuses)
        for match in self.matches.values():
            if match.match_code == match_code and match.status in allowed:
                return replace(match)
        return None

    async def delete_orphaned_matches(self, older_than: datetime) -> int:
        await asyncio.sleep(0)
        seated = {p.match_id for p in self.players}
        orphaned = [
            m.id
            for m in self.matches.values()
            if m.status == MatchStatus.WAITING and m.created_at < older_than and m.id not in seated
        ]
        for match_id in orphaned:
            del self.matches[match_id]
        return len(orphaned)

    def _seat_free(self, match_id: str, user_id: str, player_number: int) -> bool:
        for p in self.players:
            if p.match_id != match_id:
                continue
            if p.player_number == player_number or p.user_id == user_id:
                return False
        return True
