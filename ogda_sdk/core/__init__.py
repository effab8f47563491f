"""Core module with types and exceptions."""

from .types import (
    BlobState,
    BlobStatus,
    DisperseRequest,
    DisperseResult,
    GameHistoryBatch,
    Chunk,
    ChunkOk,
    ChunkErr,
    ChunkSubmissionOutcome,
    BatchOutcome,
    Sequential,
    BoundedParallel,
    SubmissionMode,
    SubmissionReceipt,
    BatchSubmissionSummary,
    RetrievedBlob,
)
from .exceptions import (
    OGDAError,
    ConfigurationError,
    ValidationError,
    OversizedBlobError,
    EmptyBlobError,
    DisperserConnectionError,
    DisperserTimeoutError,
    RemoteError,
    NotFoundError,
    ChunkPlanningError,
    BatchSubmissionError,
)

__all__ = [
    "BlobState",
    "BlobStatus",
    "DisperseRequest",
    "DisperseResult",
    "GameHistoryBatch",
    "Chunk",
    "ChunkOk",
    "ChunkErr",
    "ChunkSubmissionOutcome",
    "BatchOutcome",
    "Sequential",
    "BoundedParallel",
    "SubmissionMode",
    "SubmissionReceipt",
    "BatchSubmissionSummary",
    "RetrievedBlob",
    "OGDAError",
    "ConfigurationError",
    "ValidationError",
    "OversizedBlobError",
    "EmptyBlobError",
    "DisperserConnectionError",
    "DisperserTimeoutError",
    "RemoteError",
    "NotFoundError",
    "ChunkPlanningError",
    "BatchSubmissionError",
]
