"""Better Stack (Logtail) HTTP ingestion sink adapter.

Records are batched on the delivery event loop and posted as a JSON array
with the source token as a bearer credential. A batch is sent when it
reaches ``batch_size`` records or ``batch_interval`` seconds after its
first record, whichever comes first.
"""

import asyncio
import json
from typing import Any

import httpx

from observepy.config import DEFAULT_SINK_ENDPOINT, normalize_endpoint
from observepy.core.normalize import json_default
from observepy.errors import DeliveryError, SinkConfigurationError


class BetterStackSink:
    """HTTP implementation of RemoteSinkPort.

    Args:
        token: Better Stack source token.
        endpoint: Ingestion host or URL. A missing scheme means https.
        batch_size: Records per request.
        batch_interval: Seconds a partial batch waits before being sent.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (used by tests).

    Raises:
        SinkConfigurationError: If the token is empty or contains
            whitespace, or the endpoint has no host.
    """

    def __init__(
        self,
        token: str,
        *,
        endpoint: str = DEFAULT_SINK_ENDPOINT,
        batch_size: int = 100,
        batch_interval: float = 1.0,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not isinstance(token, str) or not token or any(c.isspace() for c in token):
            raise SinkConfigurationError("Source token must be a non-empty string without whitespace")
        endpoint = normalize_endpoint(endpoint)
        try:
            url = httpx.URL(endpoint)
        except httpx.InvalidURL as exc:
            raise SinkConfigurationError(f"Invalid ingestion endpoint {endpoint!r}: {exc}") from exc
        if not url.host:
            raise SinkConfigurationError(f"Ingestion endpoint {endpoint!r} has no host")
        if batch_size < 1:
            raise SinkConfigurationError("batch_size must be at least 1")

        self._token = token
        self._url = url
        self._batch_size = batch_size
        self._batch_interval = batch_interval
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        # Touched only from the delivery event loop.
        self._batch: list[dict[str, Any]] = []
        self._batch_future: asyncio.Future[None] | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def endpoint(self) -> str:
        return str(self._url)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def submit(self, level: str, message: str, metadata: dict[str, Any]) -> None:
        """Queue a record and wait until its batch has been delivered.

        Raises:
            DeliveryError: If the batch containing the record fails.
        """
        loop = asyncio.get_running_loop()
        payload = {key: value for key, value in metadata.items() if key != "timestamp"}
        payload["dt"] = metadata.get("timestamp")
        payload["level"] = level
        payload["message"] = message

        if self._batch_future is None:
            self._batch_future = loop.create_future()
            self._timer = loop.call_later(self._batch_interval, self._send_batch)
        future = self._batch_future
        self._batch.append(payload)
        if len(self._batch) >= self._batch_size:
            self._send_batch()
        await asyncio.shield(future)

    def _send_batch(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if not self._batch or self._batch_future is None:
            return
        batch, future = self._batch, self._batch_future
        self._batch, self._batch_future = [], None
        task = asyncio.get_running_loop().create_task(self._post(batch, future))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _post(self, batch: list[dict[str, Any]], future: asyncio.Future[None]) -> None:
        try:
            body = json.dumps(batch, default=json_default)
            response = await self._get_client().post(self._url, content=body)
            response.raise_for_status()
        except Exception as exc:
            error = DeliveryError(f"Failed to deliver {len(batch)} log record(s): {exc}")
            error.__cause__ = exc
            if not future.done():
                future.set_exception(error)
            return
        if not future.done():
            future.set_result(None)

    async def drain(self) -> None:
        """Send the open batch now and wait for every in-flight request."""
        self._send_batch()
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    async def aclose(self) -> None:
        """Drain and close the HTTP client."""
        await self.drain()
        if self._client is not None:
            await self._client.aclose()
            self._client = None
