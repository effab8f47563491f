"""Custom exceptions for the OG DA SDK.

This module defines a hierarchical exception structure for better error handling.
Every exception carries a stable machine-readable ``code`` and a ``details``
dict so callers (and any API layer on top) can react without parsing messages.

Per-chunk failures inside a batch are never raised to the caller: they are
captured into that chunk's outcome. See ``ogda_sdk.da.submitter``.
"""

from typing import Any, Dict, Optional


class OGDAError(Exception):
    """Base exception for all OG DA SDK errors.

    All custom exceptions in the SDK should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "OGDA_ERROR"
        self.details: Dict[str, Any] = dict(details) if details else {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(OGDAError):
    """Raised when configuration is invalid or incomplete.

    This includes malformed endpoint URLs, non-numeric size limits
    or non-positive concurrency settings.
    """

    def __init__(self, message: str = "Configuration error", code: str = "CONFIG_ERROR", **kwargs):
        super().__init__(message, code=code, **kwargs)


class ValidationError(OGDAError):
    """Raised when a blob fails the local size policy.

    Validation errors are caller-fixable and are never retried.
    """

    def __init__(self, message: str = "Blob validation failed", code: str = "VALIDATION_ERROR", **kwargs):
        super().__init__(message, code=code, **kwargs)


class OversizedBlobError(ValidationError):
    """Raised when a serialized blob exceeds the configured maximum size.

    Args:
        size: Encoded size of the blob in bytes
        max_size: Configured maximum in bytes
    """

    def __init__(self, size: int, max_size: int, **kwargs):
        self.size = size
        self.max_size = max_size
        super().__init__(
            f"Blob size {size} bytes exceeds maximum {max_size} bytes",
            code="BLOB_TOO_LARGE",
            **kwargs,
        )
        self.details["size"] = size
        self.details["max_size"] = max_size


class EmptyBlobError(ValidationError):
    """Raised when a blob encodes to zero bytes."""

    def __init__(self, **kwargs):
        self.size = 0
        super().__init__("Blob is empty", code="BLOB_EMPTY", **kwargs)
        self.details["size"] = 0


class DisperserConnectionError(OGDAError):
    """Raised when the disperser endpoint cannot be reached.

    This covers refused connections, failed liveness probes and transport
    timeouts. It is kept distinct from ``RemoteError`` so callers can back off
    and reconnect instead of treating the request itself as bad.
    """

    def __init__(self, message: str = "Cannot connect to DA client", code: str = "CONNECTION_ERROR", **kwargs):
        super().__init__(message, code=code, **kwargs)


class DisperserTimeoutError(DisperserConnectionError):
    """Raised when a single request exceeds its deadline.

    The connection itself may still be healthy, so a timeout does not force
    the client to reconnect.
    """

    def __init__(self, message: str = "DA client request timed out", **kwargs):
        super().__init__(message, code="TIMEOUT", **kwargs)


class RemoteError(OGDAError):
    """Raised when the disperser rejected or failed a request.

    Args:
        message: Error message reported by the disperser
        remote_code: Transport level status code (gRPC status name or HTTP status)
    """

    def __init__(self, message: str = "Disperser request failed", remote_code: Optional[str] = None, **kwargs):
        self.remote_code = remote_code
        super().__init__(message, code="REMOTE_ERROR", **kwargs)
        if remote_code is not None:
            self.details["remote_code"] = remote_code


class NotFoundError(RemoteError):
    """Raised when a retrieval references a blob unknown to the disperser."""

    def __init__(self, reference: str, blob_index: int = 0, **kwargs):
        self.reference = reference
        self.blob_index = blob_index
        super().__init__(f"Blob not found: {reference} (index {blob_index})", **kwargs)
        self.code = "BLOB_NOT_FOUND"
        self.details["reference"] = reference
        self.details["blob_index"] = blob_index


class ChunkPlanningError(OGDAError):
    """Raised when a batch cannot be split into chunks at all.

    This is the only batch-level failure that aborts a submission before
    any chunk is sent (e.g. empty input or non-positive bounds).
    """

    def __init__(self, message: str = "Cannot plan chunks", code: str = "CHUNK_PLAN_ERROR", **kwargs):
        super().__init__(message, code=code, **kwargs)


class BatchSubmissionError(OGDAError):
    """Raised when every chunk of a batch failed validation.

    When all chunks are rejected for the same structural reason (for example
    a misconfigured size limit) there is nothing partial to report, so the
    service raises this with the full outcome attached.

    Args:
        outcome: The ``BatchOutcome`` that triggered the error
    """

    def __init__(self, message: str, outcome: Any, **kwargs):
        self.outcome = outcome
        super().__init__(message, code="BATCH_SUBMISSION_ERROR", **kwargs)
        self.details["failed_chunks"] = outcome.failed_chunks


__all__ = [
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
