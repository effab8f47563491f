"""Blob size policy."""
from typing import Any, Union

from ..core.exceptions import EmptyBlobError, OversizedBlobError
from ..core.types import to_json
from ..utils.config import MAX_BLOB_SIZE


def encode_payload(payload: Any) -> bytes:
    """Encode a payload to the bytes that would be submitted.

    ``str`` is UTF-8 encoded, byte-like values are used as-is and anything
    else is serialized to compact JSON first.
    """
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return to_json(payload).encode("utf-8")


def payload_size(payload: Any) -> int:
    """Size of a payload in encoded bytes (not characters)."""
    if isinstance(payload, (bytes, bytearray)):
        return len(payload)
    if isinstance(payload, memoryview):
        return payload.nbytes
    return len(encode_payload(payload))


def validate_blob_size(payload: Union[bytes, str, Any], max_size: int = MAX_BLOB_SIZE) -> int:
    """Check a payload against the blob size policy.

    Args:
        payload: Raw bytes, text, or a JSON-serializable object
        max_size: Maximum allowed size in bytes

    Returns:
        The encoded size in bytes

    Raises:
        EmptyBlobError: If the payload encodes to zero bytes
        OversizedBlobError: If the payload exceeds ``max_size``
    """
    size = payload_size(payload)
    if size == 0:
        raise EmptyBlobError()
    if size > max_size:
        raise OversizedBlobError(size, max_size)
    return size


class BlobSizeValidator:
    """Callable holder for a fixed maximum, injected into the submitter."""

    def __init__(self, max_size: int = MAX_BLOB_SIZE):
        self.max_size = max_size

    def __call__(self, payload: Any) -> int:
        return validate_blob_size(payload, self.max_size)

    validate = __call__
