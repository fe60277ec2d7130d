import logging
import secrets
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta

from icecream import ic

from core.abstract import MatchStore
from core.config import Settings, get_settings
from core.errors import ErrorKind, MatchmakingError, StoreError
from core.models.matchmaking import MatchRecord, MatchStatus, PlayerRecord, SeatClaim

logger = logging.getLogger(__name__)

# Excludes 0/O and 1/I
MATCH_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
JOINABLE_STATUSES = (MatchStatus.WAITING, MatchStatus.ACTIVE)


def generate_match_code(length: int = 6) -> str:
    return "".join(secrets.choice(MATCH_CODE_ALPHABET) for _ in range(length))


class MatchmakingService:
    """
    Stateless 1v1 matchmaking on top of a MatchStore.

    Seat assignment relies only on the store's (match, seat) uniqueness: a
    request that loses the insert race moves on to the next waiting match or
    opens its own. Nothing is kept between calls, so any number of server
    instances can share one store.
    """

    def __init__(self, store: MatchStore, settings: Settings | None = None) -> None:
        self.store = store
        self.settings = settings or get_settings()

    async def join_random(self, level: str | None, user_id: str) -> MatchRecord:
        """
        Seat the user in the oldest joinable waiting match of ``level``, or
        open a new waiting match with the user on seat 1.
        """
        if not level:
            raise MatchmakingError(ErrorKind.INVALID_INPUT, "level is required")

        try:
            candidates = await self.store.list_waiting_matches(
                level, self.settings.matchmaking_candidate_limit
            )
            ic(level, user_id, len(candidates))

            for candidate in candidates:
                players = await self.store.list_players(candidate.id)
                if len(players) != 1:
                    continue
                host = players[0]
                if host.user_id == user_id:
                    continue

                claim = await self.store.claim_seat(candidate.id, user_id, 2)
                if claim is SeatClaim.TAKEN:
                    logger.warning(f"Lost seat race for match {candidate.id}; trying next")
                    continue

                return await self._activate(candidate.id, host)

            return await self._open_match(level, user_id)
        except StoreError as e:
            logger.error(f"join_random failed for level {level!r}: {e}")
            raise MatchmakingError(ErrorKind.STORE_FAILURE, str(e)) from e

    async def create_match(self, level: str | None, user_id: str) -> MatchRecord:
        """
        Open a private match to share by code. It starts active with the
        creator on seat 1 holding the turn, so random joiners never see it.
        """
        if not level:
            raise MatchmakingError(ErrorKind.INVALID_INPUT, "level is required")

        try:
            match = await self._allocate_code(
                lambda code: self.store.create_private_match(
                    code, level, user_id, started_at=datetime.now(UTC)
                )
            )
        except StoreError as e:
            logger.error(f"create_match failed for level {level!r}: {e}")
            raise MatchmakingError(ErrorKind.STORE_FAILURE, str(e)) from e
        logger.info(f"Created private match {match.id} ({match.match_code}) for {user_id}")
        return match

    async def join_by_code(self, match_code: str | None, user_id: str) -> MatchRecord:
        """Join a specific match shared by its code."""
        code = (match_code or "").strip().upper()
        if not code:
            raise MatchmakingError(ErrorKind.INVALID_INPUT, "matchCode is required")

        try:
            match = await self.store.find_match_by_code(code, JOINABLE_STATUSES)
            if match is None:
                raise MatchmakingError(ErrorKind.NOT_FOUND, "Match not found")

            players = await self.store.list_players(match.id)
            if any(p.user_id == user_id for p in players):
                return match
            if len(players) >= 2:
                raise MatchmakingError(ErrorKind.MATCH_FULL, "Match is full")

            host = next((p for p in players if p.player_number == 1), None)
            if host is None:
                raise MatchmakingError(ErrorKind.NOT_FOUND, "Match not found")

            claim = await self.store.claim_seat(match.id, user_id, 2)
            if claim is SeatClaim.TAKEN:
                raise MatchmakingError(ErrorKind.MATCH_FULL, "Match is full")

            return await self._activate(match.id, host)
        except StoreError as e:
            logger.error(f"join_by_code failed for code {code!r}: {e}")
            raise MatchmakingError(ErrorKind.STORE_FAILURE, str(e)) from e

    async def get_match(self, match_id: str) -> tuple[MatchRecord, list[PlayerRecord]]:
        try:
            match = await self.store.find_match(match_id)
            if match is None:
                raise MatchmakingError(ErrorKind.NOT_FOUND, "Match not found")
            players = await self.store.list_players(match_id)
        except StoreError as e:
            logger.error(f"get_match failed for {match_id}: {e}")
            raise MatchmakingError(ErrorKind.STORE_FAILURE, str(e)) from e
        return match, players

    async def purge_orphaned_matches(self, max_age: timedelta | None = None) -> int:
        """Delete waiting matches that never got a seated player."""
        if max_age is None:
            max_age = timedelta(minutes=self.settings.stale_match_minutes)
        cutoff = datetime.now(UTC) - max_age
        try:
            deleted = await self.store.delete_orphaned_matches(cutoff)
        except StoreError as e:
            logger.error(f"Orphaned match sweep failed: {e}")
            raise MatchmakingError(ErrorKind.STORE_FAILURE, str(e)) from e
        logger.info(f"Deleted {deleted} orphaned waiting matches older than {cutoff.isoformat()}")
        return deleted

    async def _activate(self, match_id: str, host: PlayerRecord) -> MatchRecord:
        # Seat 1 always takes the first turn
        match = await self.store.activate_match(
            match_id, current_player_id=host.user_id, started_at=datetime.now(UTC)
        )
        logger.info(f"Match {match_id} active; {host.user_id} moves first")
        return match

    async def _open_match(self, level: str, user_id: str) -> MatchRecord:
        match = await self._allocate_code(
            lambda code: self.store.create_waiting_match(code, level, user_id)
        )
        logger.info(f"Created waiting match {match.id} ({match.match_code}) at level {level!r}")
        return match

    async def _allocate_code(
        self, create: Callable[[str], Awaitable[MatchRecord | None]]
    ) -> MatchRecord:
        for _ in range(self.settings.match_code_attempts):
            code = generate_match_code(self.settings.match_code_length)
            match = await create(code)
            if match is not None:
                return match
            ic(f"Match code {code} already in use")

        raise StoreError(
            f"Could not allocate a unique match code after {self.settings.match_code_attempts} attempts"
        )
