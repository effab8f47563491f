"""Blob status queries.

The disperser reports status as free text and its vocabulary is not fixed,
so every string is mapped onto :class:`BlobState` with ``UNKNOWN`` as the
catch-all.
"""
from typing import Any, Awaitable, Callable, Optional, TYPE_CHECKING
import asyncio

from ..core.types import BlobState, BlobStatus
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from .client import DisperserClient

logger = get_logger("da.status")

_STATUS_MAP = {
    "PENDING": BlobState.PENDING,
    "QUEUED": BlobState.PENDING,
    "PROCESSING": BlobState.PENDING,
    "DISPERSING": BlobState.PENDING,
    "ENCODED": BlobState.PENDING,
    "GATHERING_SIGNATURES": BlobState.PENDING,
    "CONFIRMED": BlobState.CONFIRMED,
    "FINALIZED": BlobState.CONFIRMED,
    "COMPLETE": BlobState.CONFIRMED,
    "COMPLETED": BlobState.CONFIRMED,
    "FAILED": BlobState.FAILED,
    "INSUFFICIENT_SIGNATURES": BlobState.FAILED,
    "UNKNOWN": BlobState.UNKNOWN,
}


def normalize_status(raw: Any) -> BlobState:
    """Map a remote status string onto BlobState. Never raises."""
    if isinstance(raw, BlobState):
        return raw
    if raw is None:
        return BlobState.UNKNOWN
    key = str(raw).strip().upper().replace("-", "_").replace(" ", "_")
    return _STATUS_MAP.get(key, BlobState.UNKNOWN)


class BlobStatusTracker:
    """Status lookups for submitted blobs.

    Every call is a fresh remote query; nothing is cached.
    """

    def __init__(self, client: "DisperserClient"):
        self.client = client

    async def status(self, request_id: str) -> BlobStatus:
        """Get the current status of a submission.

        Raises:
            DisperserConnectionError: If the disperser is unreachable
            RemoteError: If the disperser rejected the query
        """
        return await self.client.get_status(request_id)


async def poll_until_final(
    tracker: BlobStatusTracker,
    request_id: str,
    interval: float = 2.0,
    max_attempts: int = 30,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Optional[BlobStatus]:
    """Poll until the blob is CONFIRMED or FAILED, or attempts run out.

    Query errors are not retried here; they propagate to the caller.

    Returns:
        The last status observed (possibly still PENDING/UNKNOWN)
    """
    status: Optional[BlobStatus] = None
    for attempt in range(1, max_attempts + 1):
        status = await tracker.status(request_id)
        logger.debug(f"Status of {request_id} (attempt {attempt}): {status.status.value}")
        if status.status.is_final:
            break
        if attempt < max_attempts:
            await sleep(interval)
    return status
