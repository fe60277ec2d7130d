from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from core.models.matchmaking import MatchStatus


class JoinRandomRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    level: str | None = None
    user_id: str | None = Field(default=None, alias="userId")


class CreateMatchRequest(JoinRandomRequest):
    pass


class JoinByCodeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    match_code: str | None = Field(default=None, alias="matchCode")
    user_id: str | None = Field(default=None, alias="userId")


class MatchOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    match_code: str
    level: str
    status: MatchStatus
    current_player_id: str | None = None
    created_at: datetime
    started_at: datetime | None = None


class PlayerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    match_id: str
    user_id: str
    player_number: int


class MatchResponse(BaseModel):
    match: MatchOut


class MatchDetail(BaseModel):
    match: MatchOut
    players: list[PlayerOut] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
