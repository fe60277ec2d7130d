import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any

from prisma.errors import PrismaError, UniqueViolationError

from core.abstract import MatchStore
from core.errors import StoreError
from core.models.matchmaking import MatchRecord, MatchStatus, PlayerRecord, SeatClaim

if TYPE_CHECKING:
    from prisma import Prisma
    from prisma.models import TriviaMatch, TriviaPlayer

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors() -> Iterator[None]:
    try:
        yield
    except PrismaError as e:
        raise StoreError(str(e)) from e


def _match_record(match: "TriviaMatch") -> MatchRecord:
    return MatchRecord(
        id=match.id,
        match_code=match.matchCode,
        level=match.level,
        status=MatchStatus(match.status),
        current_player_id=match.currentPlayerId,
        created_at=match.createdAt,
        started_at=match.startedAt,
    )


def _player_record(player: "TriviaPlayer") -> PlayerRecord:
    return PlayerRecord(
        id=player.id,
        match_id=player.matchId,
        user_id=player.userId,
        player_number=player.playerNumber,
    )


class PrismaMatchStore(MatchStore):
    """Match store backed by the service-level Prisma client (no row policies apply)."""

    def __init__(self, database_url: str | None = None, db: "Prisma | None" = None) -> None:
        if db is None:
            from prisma import Prisma

            datasource = {"url": database_url} if database_url else None
            db = Prisma(auto_register=True, datasource=datasource)
        self.db = db

    async def connect(self) -> None:
        with _store_errors():
            await self.db.connect()
        logger.info("Prisma match store connected")

    async def disconnect(self) -> None:
        if self.db.is_connected():
            await self.db.disconnect()

    async def list_waiting_matches(self, level: str, limit: int) -> list[MatchRecord]:
        with _store_errors():
            matches = await self.db.triviamatch.find_many(
                where={"status": MatchStatus.WAITING.value, "level": level},
                order={"createdAt": "asc"},
                take=limit,
            )
        return [_match_record(m) for m in matches]

    async def list_players(self, match_id: str) -> list[PlayerRecord]:
        with _store_errors():
            players = await self.db.triviaplayer.find_many(
                where={"matchId": match_id},
                order={"playerNumber": "asc"},
            )
        return [_player_record(p) for p in players]

    async def claim_seat(self, match_id: str, user_id: str, player_number: int) -> SeatClaim:
        with _store_errors():
            try:
                await self.db.triviaplayer.create(
                    data={"matchId": match_id, "userId": user_id, "playerNumber": player_number}
                )
            except UniqueViolationError:
                return SeatClaim.TAKEN
        return SeatClaim.SEATED

    async def activate_match(
        self, match_id: str, current_player_id: str, started_at: datetime
    ) -> MatchRecord:
        with _store_errors():
            match = await self.db.triviamatch.update(
                where={"id": match_id},
                data={
                    "status": MatchStatus.ACTIVE.value,
                    "startedAt": started_at,
                    "currentPlayerId": current_player_id,
                },
            )
        if match is None:
            raise StoreError(f"Match {match_id} vanished before activation")
        return _match_record(match)

    async def create_waiting_match(
        self, match_code: str, level: str, creator_id: str
    ) -> MatchRecord | None:
        return await self._create_with_creator(
            {"matchCode": match_code, "level": level, "status": MatchStatus.WAITING.value},
            creator_id,
        )

    async def create_private_match(
        self, match_code: str, level: str, creator_id: str, started_at: datetime
    ) -> MatchRecord | None:
        return await self._create_with_creator(
            {
                "matchCode": match_code,
                "level": level,
                "status": MatchStatus.ACTIVE.value,
                "startedAt": started_at,
                "currentPlayerId": creator_id,
            },
            creator_id,
        )

    async def find_match(self, match_id: str) -> MatchRecord | None:
        with _store_errors():
            match = await self.db.triviamatch.find_unique(where={"id": match_id})
        return _match_record(match) if match else None

    async def find_match_by_code(
        self, match_code: str, statuses: Iterable[MatchStatus]
    ) -> MatchRecord | None:
        with _store_errors():
            match = await self.db.triviamatch.find_first(
                where={"matchCode": match_code, "status": {"in": [s.value for s in statuses]}}
            )
        return _match_record(match) if match else None

    async def delete_orphaned_matches(self, older_than: datetime) -> int:
        with _store_errors():
            return await self.db.triviamatch.delete_many(
                where={
                    "status": MatchStatus.WAITING.value,
                    "createdAt": {"lt": older_than},
                    "players": {"none": {}},
                }
            )

    async def _create_with_creator(
        self, data: dict[str, Any], creator_id: str
    ) -> MatchRecord | None:
        with _store_errors():
            try:
                # Nested create keeps the match and its seat 1 in one statement.
                match = await self.db.triviamatch.create(
                    data={
                        **data,
                        "players": {"create": [{"userId": creator_id, "playerNumber": 1}]},
                    }
                )
            except UniqueViolationError:
                return None
        return _match_record(match)
