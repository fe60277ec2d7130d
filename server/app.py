import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.abstract import App, MatchStore
from core.config import Settings
from server.services import AuthService, MatchmakingService
from server.store import build_store

logger = logging.getLogger(__name__)


class ServerApp(App):
    def __init__(self, settings: Settings, store: MatchStore | None = None) -> None:
        super().__init__(settings)
        self.store = store or build_store(settings)

        @asynccontextmanager
        async def lifespan(app: FastAPI) -> AsyncIterator[None]:
            await self.store.connect()

            yield

            await self.store.disconnect()

        self.app = FastAPI(
            title="SEDETOK Trivia Matchmaker",
            description="1v1 trivia matchmaking for SEDETOK",
            version="1.0.0",
            docs_url="/docs" if settings.server_debug else None,
            redoc_url="/redoc" if settings.server_debug else None,
            lifespan=lifespan,
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self.app.state.matchmaking = MatchmakingService(self.store, settings)
        self.app.state.auth = AuthService(settings)

        from .api.base import register_error_handlers
        from .api.base import router as base_router
        from .api.match import router as match_router

        register_error_handlers(self.app)
        self.app.include_router(base_router, prefix="/api")
        self.app.include_router(match_router, prefix="/api/match")

    def run(self) -> None:
        logger.info(f"Starting matchmaker on {self.settings.server_bind}:{self.settings.server_port}")
        uvicorn.run(
            self.app,
            host=self.settings.server_bind,
            port=self.settings.server_port or 8000,
        )
