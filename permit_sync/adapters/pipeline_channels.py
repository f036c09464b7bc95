from __future__ import annotations

import asyncio
from typing import Optional

import requests

from ..errors import ChannelSendError
from ..schemas import CHANNEL_NAMES, PipelinePayload
from ..settings import Settings


class PipelineChannel:
    """
    Base interface for a managed-pipeline channel.

    ``send`` returns once the pipeline has accepted the payload and raises on
    any rejection. Buffering, batching and storage happen on the pipeline side.
    """

    name: str = ""

    async def send(self, payload: PipelinePayload) -> None:
        raise NotImplementedError


class HttpPipelineChannel(PipelineChannel):
    """
    Posts envelopes to a pipeline HTTP endpoint.

    The pipeline accepts a JSON array of records per request; each send is one
    single-record batch. The blocking ``requests`` call runs in a worker thread
    so channels can be awaited side by side.
    """

    def __init__(
        self,
        name: str,
        url: str,
        *,
        auth_token: str | None = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.name = name
        self.url = url
        self.timeout = timeout
        self.s = session or requests.Session()
        if auth_token:
            self.s.headers["Authorization"] = f"Bearer {auth_token}"

    def __repr__(self) -> str:
        return f"HttpPipelineChannel(name={self.name!r}, url={self.url!r})"

    async def send(self, payload: PipelinePayload) -> None:
        await asyncio.to_thread(self._post, payload)

    def _post(self, payload: PipelinePayload) -> None:
        body = [payload.model_dump(mode="json")]
        try:
            r = self.s.post(self.url, json=body, timeout=self.timeout)
            r.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise ChannelSendError(self.name, f"HTTP {status} from {self.url}") from e
        except requests.RequestException as e:
            raise ChannelSendError(self.name, f"{type(e).__name__}: {e}") from e


def build_channels(settings: Settings, session: Optional[requests.Session] = None) -> dict[str, PipelineChannel]:
    """One channel per pipeline name, bound to its configured endpoint.

    A shared ``session`` is used by all three channels when given.
    """
    urls = settings.pipeline_urls()
    return {
        name: HttpPipelineChannel(
            name,
            urls[name],
            auth_token=settings.pipeline_auth_token,
            timeout=settings.pipeline_timeout_seconds,
            session=session,
        )
        for name in CHANNEL_NAMES
    }
