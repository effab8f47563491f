"""Batch submission of planned chunks.

Chunks are independent units of durability: one chunk failing never stops
the others. Every chunk yields exactly one outcome and outcomes come back in
input order, whatever the submission mode.
"""
from typing import Any, Awaitable, Callable, List, Optional, Sequence
import asyncio

from ..core.types import (
    BatchOutcome,
    BlobState,
    BlobStatus,
    BoundedParallel,
    Chunk,
    ChunkErr,
    ChunkOk,
    ChunkSubmissionOutcome,
    DisperseRequest,
    Sequential,
    SubmissionMode,
    to_json,
)
from ..utils.logger import get_logger
from .client import DisperserClient
from .retry import RetryPolicy
from .status import BlobStatusTracker
from .validator import BlobSizeValidator

logger = get_logger("da.submitter")

ChunkEncoder = Callable[[Chunk], bytes]


def encode_records(chunk: Chunk) -> bytes:
    """Default encoder: the chunk's records as a compact JSON array."""
    return to_json(chunk.records).encode("utf-8")


class BatchSubmitter:
    """Submit chunks to the disperser and aggregate per-chunk outcomes.

    Args:
        client: Shared disperser client
        validator: Size check run before every submission attempt
        retry_policy: Retry collaborator (default: single attempt)
        encoder: Turns a chunk into blob bytes
        quorum_numbers: Custom quorum numbers sent with every chunk
        fetch_status: Query an initial status after each successful submit
        sleep: Awaitable used for retry backoff
    """

    def __init__(
        self,
        client: DisperserClient,
        validator: Optional[Callable[[Any], int]] = None,
        retry_policy: Optional[RetryPolicy] = None,
        encoder: ChunkEncoder = encode_records,
        quorum_numbers: Sequence[int] = (),
        fetch_status: bool = True,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.client = client
        self.validator = validator or BlobSizeValidator()
        self.retry_policy = retry_policy or RetryPolicy()
        self.encoder = encoder
        self.quorum_numbers = tuple(quorum_numbers)
        self.fetch_status = fetch_status
        self.tracker = BlobStatusTracker(client)
        self._sleep = sleep

    async def submit(
        self,
        chunks: Sequence[Chunk],
        mode: Optional[SubmissionMode] = None,
    ) -> BatchOutcome:
        """Submit every chunk and collect one outcome per chunk.

        Args:
            chunks: Planned chunks, in order
            mode: ``Sequential()`` (default) or ``BoundedParallel(n)``

        Returns:
            BatchOutcome with outcomes in the same order as ``chunks``
        """
        chunks = list(chunks)
        mode = mode or Sequential()
        outcomes: List[ChunkSubmissionOutcome] = []

        if isinstance(mode, Sequential):
            for chunk in chunks:
                outcomes.append(await self.submit_chunk(chunk))
        elif isinstance(mode, BoundedParallel):
            for start in range(0, len(chunks), mode.concurrency):
                window = chunks[start:start + mode.concurrency]
                # gather returns results in argument order, not completion order
                outcomes.extend(await asyncio.gather(*(self.submit_chunk(chunk) for chunk in window)))
        else:
            raise TypeError(f"Unsupported submission mode: {mode!r}")

        outcome = BatchOutcome(outcomes=outcomes)
        logger.info(
            f"Submitted {outcome.total_chunks} chunks: "
            f"{outcome.successful_chunks} succeeded, {outcome.failed_chunks} failed"
        )
        return outcome

    async def submit_chunk(self, chunk: Chunk) -> ChunkSubmissionOutcome:
        """Submit one chunk. Never raises for per-chunk failures."""
        index = chunk.chunk_index
        try:
            payload = self.encoder(chunk)
        except (TypeError, ValueError) as e:
            logger.warning(f"Chunk {index} could not be encoded: {e}")
            return ChunkErr(chunk_index=index, cause=e, attempts=0)

        attempt = 0
        while True:
            attempt += 1
            try:
                self.validator(payload)
                result = await self.client.disperse(DisperseRequest(payload, self.quorum_numbers))
                break
            except Exception as e:
                if not self.retry_policy.should_retry(e, attempt):
                    logger.warning(f"Chunk {index} failed after {attempt} attempt(s): {e}")
                    return ChunkErr(chunk_index=index, cause=e, attempts=attempt)
                delay = self.retry_policy.delay(attempt)
                logger.warning(f"Chunk {index} attempt {attempt} failed ({e}); retrying in {delay}s")
                await self._sleep(delay)

        status = BlobStatus(BlobState.PENDING)
        if self.fetch_status:
            try:
                status = await self.tracker.status(result.request_id)
            except Exception as e:
                # status is best-effort once the blob is accepted
                logger.warning(f"Could not get status for chunk {index} ({result.request_id}): {e}")
                status = BlobStatus(BlobState.UNKNOWN, info=str(e))

        return ChunkOk(chunk_index=index, result=result, status=status, attempts=attempt)
