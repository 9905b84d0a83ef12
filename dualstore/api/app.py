"""
FastAPI application for Dual Store Sync.

The lifespan owns the store handles: it opens both stores, runs the startup
sequence (schema, then migration) and only then lets the server accept
requests. Handles are closed when the application shuts down.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, ContextManager, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dualstore import __version__
from dualstore.api.routes import router
from dualstore.config import Settings, get_settings
from dualstore.coordinator import DualWriteCoordinator, PartialWriteListener
from dualstore.errors import WriteStage, WriteStageError
from dualstore.infrastructure.db_factory import StoreHandles, open_stores
from dualstore.startup import bootstrap
from dualstore.utils.logging import get_logger

log = get_logger(__name__)

StoresFactory = Callable[[Settings], ContextManager[StoreHandles]]


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "invalid request body"


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _validation_message(exc)},
    )


async def _handle_write_error(request: Request, exc: WriteStageError) -> JSONResponse:
    message = str(exc.cause)
    if exc.stage is WriteStage.RELATIONAL:
        message = "Failed to insert into PostgreSQL: " + message
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": message, "stage": exc.stage.value, "state": exc.state.value},
    )


def create_application(
    settings: Optional[Settings] = None,
    stores_factory: StoresFactory = open_stores,
    on_partial_write: Optional[PartialWriteListener] = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        with stores_factory(settings) as handles:
            app.state.handles = handles
            app.state.migration_report = bootstrap(handles, settings)
            app.state.coordinator = DualWriteCoordinator(
                handles.document,
                handles.relational,
                timeout=settings.store_timeout_seconds,
                on_partial_write=on_partial_write,
            )
            log.info("[API READY] accepting requests")
            yield

    app = FastAPI(title="Dual Store Sync", version=__version__, lifespan=lifespan)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(WriteStageError, _handle_write_error)
    app.include_router(router)
    return app


__all__ = ["create_application"]
