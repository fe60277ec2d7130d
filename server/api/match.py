from typing import Annotated

from fastapi import APIRouter, Header

from core.errors import ErrorKind, MatchmakingError
from core.models.match import (
    CreateMatchRequest,
    ErrorResponse,
    JoinByCodeRequest,
    JoinRandomRequest,
    MatchDetail,
    MatchOut,
    MatchResponse,
    PlayerOut,
)
from server.api.dependencies import AuthDep, MatchmakingDep

router = APIRouter(tags=["Matches"])

AuthorizationHeader = Annotated[str | None, Header()]

ERROR_RESPONSES: dict[int | str, dict] = {
    status: {"model": ErrorResponse} for status in (400, 401, 404, 409, 500)
}


@router.post("/join-random", response_model=MatchResponse, responses=ERROR_RESPONSES)
async def join_random(
    body: JoinRandomRequest,
    matchmaking: MatchmakingDep,
    auth: AuthDep,
    authorization: AuthorizationHeader = None,
) -> MatchResponse:
    """Join the oldest waiting match of a level, or open a new one."""
    if not body.level:
        raise MatchmakingError(ErrorKind.INVALID_INPUT, "level is required")
    user_id = auth.resolve_caller(authorization, body.user_id)

    match = await matchmaking.join_random(body.level, user_id)
    return MatchResponse(match=MatchOut.model_validate(match))


@router.post("/create", response_model=MatchResponse, responses=ERROR_RESPONSES)
async def create_match(
    body: CreateMatchRequest,
    matchmaking: MatchmakingDep,
    auth: AuthDep,
    authorization: AuthorizationHeader = None,
) -> MatchResponse:
    """Open a private match whose code the caller shares with a friend."""
    if not body.level:
        raise MatchmakingError(ErrorKind.INVALID_INPUT, "level is required")
    user_id = auth.resolve_caller(authorization, body.user_id)

    match = await matchmaking.create_match(body.level, user_id)
    return MatchResponse(match=MatchOut.model_validate(match))


@router.post("/join", response_model=MatchResponse, responses=ERROR_RESPONSES)
async def join_by_code(
    body: JoinByCodeRequest,
    matchmaking: MatchmakingDep,
    auth: AuthDep,
    authorization: AuthorizationHeader = None,
) -> MatchResponse:
    """Join a match someone shared by its code."""
    if not body.match_code or not body.match_code.strip():
        raise MatchmakingError(ErrorKind.INVALID_INPUT, "matchCode is required")
    user_id = auth.resolve_caller(authorization, body.user_id)

    match = await matchmaking.join_by_code(body.match_code, user_id)
    return MatchResponse(match=MatchOut.model_validate(match))


@router.get("/{match_id}", response_model=MatchDetail, responses=ERROR_RESPONSES)
async def get_match(match_id: str, matchmaking: MatchmakingDep) -> MatchDetail:
    match, players = await matchmaking.get_match(match_id)
    return MatchDetail(
        match=MatchOut.model_validate(match),
        players=[PlayerOut.model_validate(p) for p in players],
    )
