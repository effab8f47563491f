# OG DA Batch SDK
"""
OG DA Batch SDK - persist batches of records (e.g. game history) on the
0G data-availability network.

Structure:
- core/: Types (requests, results, outcomes) and the exception hierarchy
- da/: Size validation, chunk planning, disperser client and transports,
  batch submission, status tracking and the DAService composition root
- utils/: Logging, environment configuration, keccak helpers

Quick Start:
    from ogda_sdk import DAService, BoundedParallel

    async with DAService.from_env() as service:
        summary = await service.submit_game_history_batch(games, mode=BoundedParallel(3))
        print(summary.to_dict())
"""

__version__ = "0.1.0"

# Core types
from ogda_sdk.core.types import (
    BlobState,
    BlobStatus,
    DisperseRequest,
    DisperseResult,
    GameHistoryBatch,
    Chunk,
    ChunkOk,
    ChunkErr,
    BatchOutcome,
    Sequential,
    BoundedParallel,
    SubmissionReceipt,
    BatchSubmissionSummary,
    RetrievedBlob,
)

# Exceptions
from ogda_sdk.core.exceptions import (
    OGDAError,
    ValidationError,
    OversizedBlobError,
    EmptyBlobError,
    DisperserConnectionError,
    RemoteError,
    NotFoundError,
    ChunkPlanningError,
    BatchSubmissionError,
)

# Pipeline
from ogda_sdk.da.validator import validate_blob_size
from ogda_sdk.da.planner import ChunkPlanner
from ogda_sdk.da.client import DisperserClient
from ogda_sdk.da.transport import GrpcDisperserTransport, HttpGatewayTransport
from ogda_sdk.da.retry import RetryPolicy
from ogda_sdk.da.submitter import BatchSubmitter
from ogda_sdk.da.status import BlobStatusTracker
from ogda_sdk.da.service import DAService

__all__ = [
    # Version
    "__version__",
    # Core Types
    "BlobState",
    "BlobStatus",
    "DisperseRequest",
    "DisperseResult",
    "GameHistoryBatch",
    "Chunk",
    "ChunkOk",
    "ChunkErr",
    "BatchOutcome",
    "Sequential",
    "BoundedParallel",
    "SubmissionReceipt",
    "BatchSubmissionSummary",
    "RetrievedBlob",
    # Exceptions
    "OGDAError",
    "ValidationError",
    "OversizedBlobError",
    "EmptyBlobError",
    "DisperserConnectionError",
    "RemoteError",
    "NotFoundError",
    "ChunkPlanningError",
    "BatchSubmissionError",
    # Pipeline
    "validate_blob_size",
    "ChunkPlanner",
    "DisperserClient",
    "GrpcDisperserTransport",
    "HttpGatewayTransport",
    "RetryPolicy",
    "BatchSubmitter",
    "BlobStatusTracker",
    "DAService",
]
