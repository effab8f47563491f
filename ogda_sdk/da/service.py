"""DA service: the composition root for game history persistence.

Wires the planner, submitter and status tracker around one injected
:class:`DisperserClient` and exposes the caller-facing operations.

Example:
    >>> async with DAService.from_env() as service:
    ...     summary = await service.submit_game_history_batch(games, mode=BoundedParallel(3))
    ...     print(summary.successful_chunks, summary.failed_chunks)
"""
from typing import Any, Dict, Optional, Sequence
import json

from ..core.exceptions import (
    BatchSubmissionError,
    ChunkPlanningError,
    OGDAError,
    ValidationError,
)
from ..core.types import (
    BatchSubmissionSummary,
    BlobState,
    BlobStatus,
    Chunk,
    ENVELOPE_VERSION,
    GAME_RESULT_TYPE,
    GameHistoryBatch,
    RetrievedBlob,
    Sequential,
    SubmissionMode,
    SubmissionReceipt,
    now_ms,
)
from ..utils.config import (
    BlobPolicy,
    GameHistoryConfig,
    get_blob_policy,
    get_game_history_config,
    get_network_config,
)
from ..utils.hashing import blob_reference_hash, keccak256_hex
from ..utils.logger import get_logger
from .client import DisperserClient
from .planner import ChunkPlanner, json_record_size
from .retry import RetryPolicy
from .status import BlobStatusTracker
from .submitter import BatchSubmitter
from .validator import BlobSizeValidator, encode_payload

logger = get_logger("da.service")


def game_history_overhead(record_count: int) -> int:
    """Upper bound on the envelope bytes around the games of one chunk."""
    probe = GameHistoryBatch(
        games=[],
        timestamp=now_ms(),
        chunk_index=record_count,
        total_chunks=record_count,
    )
    # totalGames is serialized as "0" in the probe
    return len(probe.encode()) + len(str(record_count))


class DAService:
    """High-level DA operations.

    Args:
        client: Disperser client (owned: closed with the service)
        policy: Blob size and retry limits
        game_config: Game history batching defaults
        retry_policy: Per-chunk retry policy (default: single attempt)
        quorum_numbers: Custom quorum numbers for every submission
    """

    def __init__(
        self,
        client: DisperserClient,
        policy: Optional[BlobPolicy] = None,
        game_config: Optional[GameHistoryConfig] = None,
        retry_policy: Optional[RetryPolicy] = None,
        quorum_numbers: Sequence[int] = (),
    ):
        self.client = client
        self.policy = policy or BlobPolicy()
        self.game_config = game_config or GameHistoryConfig()
        self.retry_policy = retry_policy or RetryPolicy()
        self.quorum_numbers = tuple(quorum_numbers)
        self.validator = BlobSizeValidator(self.policy.max_blob_size)
        self.tracker = BlobStatusTracker(client)

    @classmethod
    def from_env(cls, network: Optional[str] = None, **kwargs) -> "DAService":
        """Build a service from environment configuration.

        Retries follow ``OGDA_MAX_RETRIES``/``OGDA_RETRY_DELAY`` unless a
        ``retry_policy`` is passed.
        """
        network_config = get_network_config(network)
        policy = get_blob_policy()
        client = DisperserClient(
            network_config.da_client_url,
            connect_timeout=policy.connect_timeout,
            request_timeout=policy.submission_timeout,
        )
        kwargs.setdefault("retry_policy", RetryPolicy.from_blob_policy(policy))
        kwargs.setdefault("game_config", get_game_history_config())
        logger.info(f"DA service configured for {network_config.network_name} ({network_config.da_client_url})")
        return cls(client, policy=policy, **kwargs)

    async def __aenter__(self) -> "DAService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    def _submitter(self, encoder) -> BatchSubmitter:
        return BatchSubmitter(
            self.client,
            validator=self.validator,
            retry_policy=self.retry_policy,
            encoder=encoder,
            quorum_numbers=self.quorum_numbers,
        )

    async def submit_blob(
        self,
        data: Any,
        quorum_numbers: Optional[Sequence[int]] = None,
    ) -> SubmissionReceipt:
        """Submit a single blob.

        Args:
            data: Bytes, text, or a JSON-serializable object
            quorum_numbers: Overrides the service's quorum numbers

        Returns:
            SubmissionReceipt; ``status`` is PENDING when the status query fails

        Raises:
            ValidationError: If the blob is empty or too large
            DisperserConnectionError: If the DA client is unreachable
            RemoteError: If the disperser rejected the blob
        """
        payload = encode_payload(data)
        size = self.validator(payload)
        logger.info(f"Submitting blob of size: {size} bytes")

        quorums = self.quorum_numbers if quorum_numbers is None else tuple(quorum_numbers)
        result = await self.client.disperse(payload, quorums)

        status: Optional[BlobStatus] = None
        try:
            status = await self.tracker.status(result.request_id)
        except Exception as e:
            logger.warning(f"Could not get blob status for {result.request_id}: {e}")

        return SubmissionReceipt(
            request_id=result.request_id,
            blob_hash=blob_reference_hash(result.request_id),
            data_root=keccak256_hex(payload),
            result=result.result,
            blob_size=result.blob_size,
            status=status.status if status else BlobState.PENDING,
            status_info=status.info if status else None,
        )

    async def submit_game_history_batch(
        self,
        games: Sequence[Any],
        batch_size: Optional[int] = None,
        mode: Optional[SubmissionMode] = None,
        max_chunk_bytes: Optional[int] = None,
    ) -> BatchSubmissionSummary:
        """Submit game results, chunking when the batch is too large.

        A batch within both ``batch_size`` records and the recommended byte
        size goes out as one blob without chunk metadata. Larger batches are
        split and every chunk carries ``chunkIndex``/``totalChunks``.

        Args:
            games: Ordered game records
            batch_size: Max games per blob (default from config)
            mode: ``Sequential()`` (default) or ``BoundedParallel(n)``
            max_chunk_bytes: Byte bound per chunk (default: recommended batch size)

        Returns:
            BatchSubmissionSummary with per-chunk counts and blob hashes

        Raises:
            ChunkPlanningError: If ``games`` is empty, a bound is not positive
                or a game is not JSON-serializable
            BatchSubmissionError: If every chunk failed validation
        """
        games = list(games)
        if not games:
            raise ChunkPlanningError("Game results array is required")

        if batch_size is None:
            batch_size = self.game_config.batch_size
        if max_chunk_bytes is None:
            max_chunk_bytes = self.policy.recommended_batch_size
        mode = mode or Sequential()

        planner = ChunkPlanner(
            record_size=json_record_size,
            envelope_overhead=game_history_overhead(len(games)),
        )
        chunks = planner.plan(games, batch_size, max_chunk_bytes)
        chunked = len(chunks) > 1
        timestamp = now_ms()

        def encode_chunk(chunk: Chunk) -> bytes:
            return GameHistoryBatch(
                games=chunk.records,
                timestamp=timestamp,
                chunk_index=chunk.chunk_index if chunked else None,
                total_chunks=chunk.total_chunks if chunked else None,
            ).encode()

        if chunked:
            logger.info(f"Chunking {len(games)} games into {len(chunks)} blobs")

        outcome = await self._submitter(encode_chunk).submit(chunks, mode)

        failures = outcome.failures()
        if failures and len(failures) == outcome.total_chunks:
            causes = {type(failure.cause) for failure in failures}
            if len(causes) == 1 and all(isinstance(f.cause, ValidationError) for f in failures):
                raise BatchSubmissionError(
                    f"All {outcome.total_chunks} chunks failed validation: {failures[0].cause}",
                    outcome,
                )

        blob_hashes = [blob_reference_hash(result.request_id) for result in outcome.results()]
        summary = BatchSubmissionSummary(
            success=outcome.success,
            successful_chunks=outcome.successful_chunks,
            failed_chunks=outcome.failed_chunks,
            total_games=len(games),
            blob_hashes=blob_hashes,
            total_chunks=len(chunks),
            outcome=outcome,
        )
        if not chunked and outcome.success:
            summary.request_id = outcome.results()[0].request_id
            summary.blob_hash = blob_hashes[0]

        if outcome.is_partial_failure:
            logger.warning(
                f"Game history batch partially failed: {outcome.failed_chunks} of "
                f"{outcome.total_chunks} chunks not submitted"
            )
        return summary

    async def submit_game_result(self, game: Dict[str, Any]) -> SubmissionReceipt:
        """Submit a single game result as its own blob."""
        envelope = {
            "type": GAME_RESULT_TYPE,
            "timestamp": now_ms(),
            "game": game,
            "version": ENVELOPE_VERSION,
        }
        return await self.submit_blob(envelope)

    async def retrieve_blob(self, batch_header_hash: str, blob_index: int = 0) -> RetrievedBlob:
        """Retrieve a blob and decode it when it is UTF-8 text or JSON.

        Raises:
            ValueError: If ``batch_header_hash`` is empty
            NotFoundError: If the blob is unknown to the disperser
            DisperserConnectionError: If the DA client is unreachable
        """
        if not batch_header_hash:
            raise ValueError("Batch header hash is required")

        data = await self.client.retrieve(batch_header_hash, blob_index)
        blob = RetrievedBlob(batch_header_hash=batch_header_hash, blob_index=blob_index, data=data)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            return blob

        try:
            blob.payload = json.loads(text)
            blob.format = "json"
        except ValueError:
            blob.payload = text
            blob.format = "string"
        return blob

    async def get_status(self, request_id: str) -> BlobStatus:
        """Current status of a submission (fresh query)."""
        return await self.tracker.status(request_id)

    async def check_availability(self) -> bool:
        """Whether the DA client answers its liveness probe. Never raises."""
        try:
            await self.client.connect()
        except OGDAError as e:
            logger.warning(f"DA client availability check failed: {e}")
            return False
        return True

