"""Blob submission and batch-chunking pipeline."""

from .validator import BlobSizeValidator, validate_blob_size
from .planner import ChunkPlanner, plan_chunks
from .transport import DisperserTransport, GrpcDisperserTransport, HttpGatewayTransport
from .client import DisperserClient
from .retry import RetryPolicy, constant_backoff, exponential_backoff
from .status import BlobStatusTracker, normalize_status, poll_until_final
from .submitter import BatchSubmitter
from .service import DAService

__all__ = [
    "BlobSizeValidator",
    "validate_blob_size",
    "ChunkPlanner",
    "plan_chunks",
    "DisperserTransport",
    "GrpcDisperserTransport",
    "HttpGatewayTransport",
    "DisperserClient",
    "RetryPolicy",
    "constant_backoff",
    "exponential_backoff",
    "BlobStatusTracker",
    "normalize_status",
    "poll_until_final",
    "BatchSubmitter",
    "DAService",
]
