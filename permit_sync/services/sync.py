"""Validate a permit, fan it out to the three pipelines, fall back to the database.

One ``process`` call handles one record and keeps nothing afterwards. The
pipeline sends run concurrently and are all awaited before any decision is
made; the fallback write happens only after every send has settled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from ..adapters.pipeline_channels import PipelineChannel
from ..schemas import CHANNEL_NAMES, PermitData, PipelineMetadata, PipelinePayload, SyncResult
from ..settings import Settings
from ..transform import to_analytics, to_events, to_ingestion
from ..validation import validate_permit_data
from .fallback import FallbackStore

DEFAULT_SOURCE = Settings.model_fields["source_tag"].default
DEFAULT_VERSION = Settings.model_fields["interface_version"].default

CHANNEL_TRANSFORMS: dict[str, Callable[[PermitData], Any]] = {
    "ingestion": to_ingestion,
    "events": lambda permit: {"events": to_events(permit)},
    "analytics": to_analytics,
}


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class PermitSyncService:
    def __init__(
        self,
        channels: Mapping[str, PipelineChannel],
        fallback: FallbackStore,
        logger: logging.Logger,
        *,
        source: str = DEFAULT_SOURCE,
        version: str = DEFAULT_VERSION,
        clock: Callable[[], str] = _utc_timestamp,
    ):
        missing = [name for name in CHANNEL_NAMES if name not in channels]
        if missing:
            raise ValueError(f"Missing pipeline channels: {', '.join(missing)}")

        self.channels = dict(channels)
        self.fallback = fallback
        self.logger = logger
        self.source = source
        self.version = version
        self.clock = clock

    def build_payload(self, pipeline: str, permit: PermitData) -> PipelinePayload:
        return PipelinePayload(
            data=CHANNEL_TRANSFORMS[pipeline](permit),
            metadata=PipelineMetadata(
                timestamp=self.clock(),
                source=self.source,
                version=self.version,
                pipeline_target=pipeline,
            ),
        )

    async def _send(self, pipeline: str, permit: PermitData) -> None:
        payload = self.build_payload(pipeline, permit)
        await self.channels[pipeline].send(payload)
        self.logger.debug(
            "Sent to pipeline",
            extra={"pipeline": pipeline, "permit_id": permit.get("id")},
        )

    async def process(self, permit: PermitData) -> SyncResult:
        validation = validate_permit_data(permit)
        if not validation.valid:
            self.logger.error("Data validation failed", extra={"errors": validation.errors})
            return SyncResult(success=False, errors=validation.errors)

        permit_id = permit.get("id")
        self.logger.info("Processing permit data", extra={"permit_id": permit_id})

        results = await asyncio.gather(
            *(self._send(name, permit) for name in CHANNEL_NAMES),
            return_exceptions=True,
        )

        errors: list[str] = []
        for name, result in zip(CHANNEL_NAMES, results):
            # CancelledError and other BaseExceptions are failures too
            if isinstance(result, BaseException):
                error = f"Failed to send to {name} pipeline: {str(result) or type(result).__name__}"
                errors.append(error)
                self.logger.error(
                    error,
                    extra={"pipeline": name, "permit_id": permit_id},
                    exc_info=result,
                )

        if not errors:
            return SyncResult(success=True)

        self.logger.warning(
            "Some pipelines failed, attempting fallback store",
            extra={"permit_id": permit_id},
        )
        try:
            await self.fallback.upsert(permit)
        except Exception as e:
            error = f"Fallback store also failed: {e}"
            errors.append(error)
            self.logger.error(error, extra={"permit_id": permit_id}, exc_info=e)
            return SyncResult(success=False, errors=errors, fallback_used=True)

        self.logger.info("Saved to fallback store", extra={"permit_id": permit_id})
        return SyncResult(success=True, errors=errors, fallback_used=True)
