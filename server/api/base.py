import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.errors import ErrorKind, MatchmakingError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["API"])


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


async def matchmaking_error_handler(request: Request, exc: MatchmakingError) -> JSONResponse:
    return JSONResponse(status_code=exc.kind.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    logger.debug(f"Rejected request to {request.url.path}: {errors}")
    return JSONResponse(
        status_code=ErrorKind.INVALID_INPUT.status_code,
        content={"error": f"Invalid request body: {message}"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=ErrorKind.STORE_FAILURE.status_code,
        content={"error": str(exc) or type(exc).__name__},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": message}``."""
    app.add_exception_handler(MatchmakingError, matchmaking_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
