"""Keccak helpers for caller-facing reference tokens."""
from typing import Union

from eth_hash.auto import keccak


def keccak256_hex(data: Union[bytes, str]) -> str:
    """0x-prefixed keccak256 of ``data`` (text is UTF-8 encoded)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return "0x" + keccak(data).hex()


def blob_reference_hash(request_id: str) -> str:
    """The ``blobHash`` reported to callers for a submission.

    This is keccak256 of the opaque request id, NOT of the blob content: it
    identifies a submission, it does not prove anything about the data. Use
    the submission's ``data_root`` for a content hash.
    """
    return keccak256_hex(request_id)
