"""Configuration management utilities.

Everything is read from the environment (optionally seeded from a ``.env``
file via :func:`load_env`). Nothing is cached at import time, so tests can
patch ``os.environ`` freely.

Environment variables (all optional):

    OGDA_NETWORK=TESTNET                  # or MAINNET
    OGDA_CLIENT_URL=http://localhost:51001
    OGDA_RPC_URL=https://evmrpc-testnet.0g.ai
    OGDA_MAINNET_RPC_URL=https://evmrpc.0g.ai
    OGDA_MAX_BLOB_SIZE=32505852
    OGDA_SUBMISSION_TIMEOUT=60            # seconds
    OGDA_MAX_RETRIES=3
    OGDA_RETRY_DELAY=2                    # seconds
    OGDA_GAME_BATCH_SIZE=100
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlparse

from dotenv import load_dotenv

from ..core.exceptions import ConfigurationError


DEFAULT_DA_CLIENT_URL = "http://localhost:51001"
DEFAULT_DA_CLIENT_PORT = 51001

# Size policy
MAX_BLOB_SIZE = 32505852  # ~32 MB
MIN_BLOB_SIZE = 1
RECOMMENDED_BATCH_SIZE = 1000000  # ~1 MB, auto-chunking threshold
GAME_HISTORY_BATCH_SIZE = 100  # games per blob


def load_env(path: Optional[str] = None) -> bool:
    """Load a ``.env`` file into the process environment.

    Existing variables are not overridden.

    Returns:
        True if a file was found and loaded
    """
    return load_dotenv(path) if path else load_dotenv()


def _get_int(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value.strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid integer for {key}: {value!r}") from e


def _get_float(key: str, default: float) -> float:
    value = os.environ.get(key)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value.strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid number for {key}: {value!r}") from e


@dataclass(frozen=True)
class DANetworkConfig:
    """Network-level settings for one 0G deployment."""
    network_name: str
    rpc_url: str
    da_client_url: str
    entrance_contract: str
    chain_id: int

    @property
    def is_default_client_url(self) -> bool:
        return self.da_client_url == DEFAULT_DA_CLIENT_URL


@dataclass(frozen=True)
class BlobPolicy:
    """Blob size limits, timeouts and retry defaults."""
    max_blob_size: int = MAX_BLOB_SIZE
    min_blob_size: int = MIN_BLOB_SIZE
    recommended_batch_size: int = RECOMMENDED_BATCH_SIZE
    submission_timeout: float = 60.0
    connect_timeout: float = 5.0
    max_retries: int = 3
    retry_delay: float = 2.0

    def __post_init__(self):
        if self.min_blob_size < 1:
            raise ConfigurationError("min_blob_size must be >= 1")
        if self.max_blob_size < self.min_blob_size:
            raise ConfigurationError("max_blob_size must be >= min_blob_size")
        if self.recommended_batch_size < 1:
            raise ConfigurationError("recommended_batch_size must be >= 1")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be >= 0")
        if self.submission_timeout <= 0 or self.connect_timeout <= 0:
            raise ConfigurationError("timeouts must be positive")


@dataclass(frozen=True)
class GameHistoryConfig:
    """Defaults for game history batching."""
    batch_size: int = GAME_HISTORY_BATCH_SIZE
    parallel_concurrency: int = 3

    def __post_init__(self):
        if self.batch_size < 1:
            raise ConfigurationError("batch_size must be >= 1")
        if self.parallel_concurrency < 1:
            raise ConfigurationError("parallel_concurrency must be >= 1")


def get_network_config(network: Optional[str] = None) -> DANetworkConfig:
    """Get the DA network config selected by ``network`` or ``OGDA_NETWORK``."""
    name = (network or os.environ.get("OGDA_NETWORK") or "TESTNET").strip().upper()
    client_url = os.environ.get("OGDA_CLIENT_URL") or DEFAULT_DA_CLIENT_URL

    if name == "MAINNET":
        return DANetworkConfig(
            network_name="0G Mainnet",
            rpc_url=os.environ.get("OGDA_MAINNET_RPC_URL") or "https://evmrpc.0g.ai",
            da_client_url=client_url,
            entrance_contract="0x857C0A28A8634614BB2C96039Cf4a20AFF709Aa9",
            chain_id=16601,
        )
    if name == "TESTNET":
        return DANetworkConfig(
            network_name="0G Testnet",
            rpc_url=os.environ.get("OGDA_RPC_URL") or "https://evmrpc-testnet.0g.ai",
            da_client_url=client_url,
            entrance_contract="0x857C0A28A8634614BB2C96039Cf4a20AFF709Aa9",
            chain_id=16602,
        )
    raise ConfigurationError(f"Unknown network: {name!r} (expected TESTNET or MAINNET)")


def get_blob_policy() -> BlobPolicy:
    """Build a BlobPolicy from defaults and environment overrides."""
    return BlobPolicy(
        max_blob_size=_get_int("OGDA_MAX_BLOB_SIZE", MAX_BLOB_SIZE),
        submission_timeout=_get_float("OGDA_SUBMISSION_TIMEOUT", 60.0),
        max_retries=_get_int("OGDA_MAX_RETRIES", 3),
        retry_delay=_get_float("OGDA_RETRY_DELAY", 2.0),
    )


def get_game_history_config() -> GameHistoryConfig:
    """Build a GameHistoryConfig from defaults and environment overrides."""
    return GameHistoryConfig(batch_size=_get_int("OGDA_GAME_BATCH_SIZE", GAME_HISTORY_BATCH_SIZE))


def parse_endpoint(url: str) -> Tuple[str, int]:
    """Split a DA client URL into ``(host, port)``.

    Bare ``host:port`` strings are accepted as well; the port defaults to 51001.
    """
    if not url or not url.strip():
        raise ConfigurationError("DA client URL is empty")
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"grpc://{candidate}"
    try:
        parsed = urlparse(candidate)
        port = parsed.port
    except ValueError as e:
        raise ConfigurationError(f"Invalid DA client URL: {url!r}") from e
    if not parsed.hostname:
        raise ConfigurationError(f"Invalid DA client URL: {url!r}")
    return parsed.hostname, port or DEFAULT_DA_CLIENT_PORT
