from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .adapters.pipeline_channels import build_channels
from .db import init_db, make_engine, make_session_factory
from .log import LogConfig
from .schemas import ErrorOut, HealthOut, SyncAccepted, SyncRejected
from .services.fallback import SqlFallbackStore
from .services.sync import PermitSyncService
from .settings import Settings


def build_service(settings: Settings, logger: logging.Logger) -> PermitSyncService:
    engine = make_engine(settings.database_url)
    init_db(engine)
    return PermitSyncService(
        build_channels(settings),
        SqlFallbackStore(make_session_factory(engine)),
        logger,
        source=settings.source_tag,
        version=settings.interface_version,
    )


def create_app(
    settings: Settings | None = None,
    service: PermitSyncService | None = None,
    logger: logging.Logger | None = None,
) -> FastAPI:
    """App factory; run with ``uvicorn permit_sync.main:create_app --factory``."""
    settings = settings or Settings()
    logger = logger or LogConfig(settings.log_level).build_logger(f"permit_sync.{settings.environment}")
    service = service or build_service(settings, logger)

    app = FastAPI(title=settings.app_name)

    @app.get("/health", response_model=HealthOut)
    def health():
        return HealthOut(ok=True, app=settings.app_name, environment=settings.environment)

    @app.post(
        "/",
        responses={
            200: {"model": SyncAccepted},
            400: {"model": SyncRejected},
            500: {"model": ErrorOut},
        },
    )
    async def sync_permit(request: Request):
        # raw body on purpose: the validator reports every defect, not just the first
        try:
            permit = await request.json()
            result = await service.process(permit)

            if result.success:
                permit_id = permit.get("id")
                logger.info("Permit data processed successfully", extra={"permit_id": permit_id})
                body = SyncAccepted(message="Permit data processed successfully", permit_id=permit_id)
                return JSONResponse(body.model_dump(), status_code=200)

            logger.error("Permit data processing failed", extra={"errors": result.errors})
            return JSONResponse(SyncRejected(errors=result.errors).model_dump(), status_code=400)

        except Exception:
            logger.exception("Unexpected error handling permit request")
            return JSONResponse(ErrorOut(error="Internal server error").model_dump(), status_code=500)

    return app
