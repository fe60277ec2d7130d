from typing import Annotated

from fastapi import Depends, Request

from server.services import AuthService, MatchmakingService


def get_matchmaking_service(request: Request) -> MatchmakingService:
    return request.app.state.matchmaking


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth


MatchmakingDep = Annotated[MatchmakingService, Depends(get_matchmaking_service)]
AuthDep = Annotated[AuthService, Depends(get_auth_service)]
