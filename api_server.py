from __future__ import annotations  # FastAPI server exposing the mock interview API

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api import install_error_handlers, router
from config import Settings, settings
from interview_session import SessionStore
from llm_gateway import LlmGateway, build_gateway
from observability import configure_logging
from services import ContinuationPolicy, InterviewEngine


logger = logging.getLogger(__name__)


async def _check_provider(gateway: LlmGateway) -> None:  # Warn early; the server starts either way
    logger.info("Testing %s connection...", gateway.provider)
    status = await gateway.test_connection()
    if not status.connected:
        logger.warning("Cannot connect to %s; interview features will not work.", gateway.provider)
    elif not status.available:
        logger.warning("Model %s not found on %s; interview features will not work.", gateway.model, gateway.provider)
    else:
        logger.info("%s connected successfully with model: %s", gateway.provider, status.model)


def create_app(
    cfg: Optional[Settings] = None,
    *,
    gateway: Optional[LlmGateway] = None,
    store: Optional[SessionStore] = None,
    check_provider: bool = True,
    run_cleanup: bool = True,
) -> FastAPI:
    """Build the app with one gateway, one store and one engine per process."""

    cfg = cfg or settings
    gateway = gateway or build_gateway(cfg)
    store = store or SessionStore(
        cfg.SESSIONS_DIR,
        max_session_age_ms=cfg.MAX_SESSION_AGE_MS,
        retention_s=cfg.COMPLETED_RETENTION_S,
    )
    engine = InterviewEngine(gateway, store, policy=ContinuationPolicy.from_settings(cfg))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if check_provider:
            await _check_provider(gateway)
        cleanup: Optional[asyncio.Task] = None
        if run_cleanup:
            cleanup = asyncio.create_task(store.run_cleanup(cfg.CLEANUP_INTERVAL_S))
        try:
            yield
        finally:
            if cleanup is not None:
                cleanup.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await cleanup
            store.close()

    app = FastAPI(title="Mock Interview API", lifespan=lifespan)
    app.state.engine = engine
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.CORS_ORIGINS),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):  # Request logging middleware
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.get("/health")
    async def health() -> Dict[str, object]:
        return {
            "success": True,
            "message": "Mock interview server is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    app.include_router(router)
    install_error_handlers(app)
    return app


app = create_app()


def main() -> None:  # Console entry point
    configure_logging()
    logger.info("Starting server on %s:%d with %s", settings.HOST, settings.PORT, app.state.engine.gateway.provider)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
