import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lockerkeep.core.errors import (
    ConflictError,
    LockerKeepError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

_STATUS_CODES = {
    ValidationError: 422,
    NotFoundError: 404,
    ConflictError: 409,
    PersistenceError: 409,
}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LockerKeepError)
    async def lockerkeep_error(request: Request, exc: LockerKeepError) -> JSONResponse:
        status_code = next((code for cls, code in _STATUS_CODES.items() if isinstance(exc, cls)), 400)
        if isinstance(exc, PersistenceError):
            logger.warning("persistence_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
