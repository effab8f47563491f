"""Disperser client.

Owns one transport to one DA client endpoint. The connection is opened
lazily on first use, verified with a liveness probe, and then reused by all
calls (including concurrent ones) until it is closed or fails.

Example:
    >>> async with DisperserClient("http://localhost:51001") as client:
    ...     result = await client.disperse(b'{"hello": "da"}')
    ...     status = await client.get_status(result.request_id)
"""
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar
import asyncio

from ..core.exceptions import DisperserConnectionError, DisperserTimeoutError
from ..core.types import BlobStatus, DisperseRequest, DisperseResult
from ..utils.config import get_network_config
from ..utils.logger import get_logger
from .status import normalize_status
from .transport import DisperserTransport, GrpcDisperserTransport
from .validator import encode_payload

logger = get_logger("da.client")

T = TypeVar("T")


class DisperserClient:
    """Client for the three disperser operations.

    Args:
        endpoint: DA client URL; defaults to the configured network's URL
        transport: Explicit transport (overrides ``endpoint``)
        connect_timeout: Seconds allowed for the liveness probe
        request_timeout: Per-call deadline in seconds
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        transport: Optional[DisperserTransport] = None,
        connect_timeout: float = 5.0,
        request_timeout: Optional[float] = 60.0,
    ):
        if transport is None:
            endpoint = endpoint or get_network_config().da_client_url
            transport = GrpcDisperserTransport.from_url(endpoint)
        self._transport = transport
        self.connect_timeout = connect_timeout
        self.request_timeout = request_timeout
        self._ready = False
        self._lock = asyncio.Lock()

    @property
    def endpoint(self) -> str:
        return self._transport.endpoint

    @property
    def is_ready(self) -> bool:
        """True once the liveness probe has passed and until close/failure."""
        return self._ready

    async def __aenter__(self) -> "DisperserClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def connect(self) -> None:
        """Open the transport and probe the endpoint.

        No-op when already connected.

        Raises:
            DisperserConnectionError: If the endpoint is unreachable; the
                transport is closed and the client stays not ready
        """
        async with self._lock:
            if self._ready:
                return
            logger.info(f"Connecting to DA client at {self.endpoint}...")
            try:
                await self._transport.open()
                await self._transport.probe(self.connect_timeout)
            except Exception:
                logger.error(f"Failed to connect to DA client at {self.endpoint}")
                await self._transport.close()
                raise
            self._ready = True
            logger.info(f"Connected to DA client at {self.endpoint}")

    async def close(self) -> None:
        """Close the transport. The next call reconnects."""
        async with self._lock:
            was_ready = self._ready
            self._ready = False
            await self._transport.close()
        if was_ready:
            logger.info(f"Connection to {self.endpoint} closed")

    async def _invalidate(self) -> None:
        # Transport stays open: in-flight sibling calls share it. The next
        # call re-runs the probe before using it.
        async with self._lock:
            if self._ready:
                logger.warning(f"Connection to {self.endpoint} failed; will reconnect on next call")
            self._ready = False

    async def _call(self, operation: Callable[[], Awaitable[T]]) -> T:
        await self.connect()
        try:
            return await operation()
        except DisperserTimeoutError:
            raise
        except DisperserConnectionError:
            await self._invalidate()
            raise

    async def disperse(self, blob: Any, quorum_numbers: Sequence[int] = ()) -> DisperseResult:
        """Submit a blob to the disperser.

        Args:
            blob: A DisperseRequest, raw bytes, text, or a JSON-serializable object
            quorum_numbers: Custom quorum numbers (ignored for a DisperseRequest)

        Returns:
            DisperseResult with the opaque request id

        Raises:
            DisperserConnectionError: If the endpoint is unreachable
            RemoteError: If the disperser rejected the request
        """
        if isinstance(blob, DisperseRequest):
            request = blob
        else:
            request = DisperseRequest(encode_payload(blob), tuple(quorum_numbers))

        logger.debug(f"Dispersing blob ({len(request.data)} bytes)")
        result, request_id = await self._call(
            lambda: self._transport.disperse_blob(request.data, request.quorum_numbers, self.request_timeout)
        )
        logger.debug(f"Blob dispersed, request id {request_id} ({result})")
        return DisperseResult(request_id=request_id, result=result, blob_size=len(request.data))

    async def retrieve(self, batch_header_hash: str, blob_index: int = 0) -> bytes:
        """Fetch blob bytes.

        Raises:
            NotFoundError: If the reference is unknown to the disperser
            DisperserConnectionError: If the endpoint is unreachable
        """
        logger.debug(f"Retrieving blob {batch_header_hash} (index {blob_index})")
        return await self._call(
            lambda: self._transport.retrieve_blob(batch_header_hash, blob_index, self.request_timeout)
        )

    async def get_status(self, request_id: str) -> BlobStatus:
        """Get the status of a submission.

        Raises:
            DisperserConnectionError: If the endpoint is unreachable
            RemoteError: If the disperser rejected the query
        """
        status, info = await self._call(
            lambda: self._transport.get_blob_status(request_id, self.request_timeout)
        )
        return BlobStatus(status=normalize_status(status), info=info or "")
