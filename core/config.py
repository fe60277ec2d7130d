from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    server_bind: str = "0.0.0.0"
    server_port: int | None = 8000
    server_secret_key: str = "sedetok-dev-secret"
    server_debug: bool = False
    server_access_token_expire_minutes: int = 60 * 24 * 7
    server_algorithm: str = "HS256"

    database_url: str | None = None
    store_backend: Literal["prisma", "memory"] = "prisma"

    matchmaking_candidate_limit: int = 10
    match_code_length: int = 6
    match_code_attempts: int = 5
    stale_match_minutes: int = 30

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()


def get_settings() -> Settings:
    return settings
