"""Tests for configuration helpers."""

import os

import pytest

from ogda_sdk.core.exceptions import ConfigurationError
from ogda_sdk.utils.config import (
    BlobPolicy,
    GameHistoryConfig,
    get_blob_policy,
    get_game_history_config,
    get_network_config,
    load_env,
    parse_endpoint,
)
from ogda_sdk.utils.hashing import blob_reference_hash, keccak256_hex


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "OGDA_NETWORK",
        "OGDA_CLIENT_URL",
        "OGDA_RPC_URL",
        "OGDA_MAINNET_RPC_URL",
        "OGDA_MAX_BLOB_SIZE",
        "OGDA_SUBMISSION_TIMEOUT",
        "OGDA_MAX_RETRIES",
        "OGDA_RETRY_DELAY",
        "OGDA_GAME_BATCH_SIZE",
    ):
        monkeypatch.delenv(key, raising=False)


class TestNetworkConfig:
    """Test network selection."""

    def test_testnet_default(self):
        """Testnet is the default network."""
        config = get_network_config()
        assert config.chain_id == 16602
        assert config.rpc_url == "https://evmrpc-testnet.0g.ai"
        assert config.da_client_url == "http://localhost:51001"
        assert config.is_default_client_url

    def test_mainnet_from_env(self, monkeypatch):
        """OGDA_NETWORK selects mainnet."""
        monkeypatch.setenv("OGDA_NETWORK", "mainnet")
        monkeypatch.setenv("OGDA_CLIENT_URL", "http://da.example:51001")
        config = get_network_config()
        assert config.chain_id == 16601
        assert config.da_client_url == "http://da.example:51001"
        assert not config.is_default_client_url

    def test_unknown_network(self):
        """Unknown networks are a configuration error."""
        with pytest.raises(ConfigurationError):
            get_network_config("devnet")


class TestPolicies:
    """Test size and batching policies."""

    def test_defaults(self):
        """Defaults match the network limits."""
        policy = get_blob_policy()
        assert policy.max_blob_size == 32505852
        assert policy.recommended_batch_size == 1000000
        assert policy.submission_timeout == 60.0
        assert policy.max_retries == 3
        assert policy.retry_delay == 2.0
        assert get_game_history_config().batch_size == 100

    def test_env_overrides(self, monkeypatch):
        """Environment variables override defaults."""
        monkeypatch.setenv("OGDA_MAX_BLOB_SIZE", "1024")
        monkeypatch.setenv("OGDA_MAX_RETRIES", "0")
        monkeypatch.setenv("OGDA_GAME_BATCH_SIZE", "25")
        assert get_blob_policy().max_blob_size == 1024
        assert get_blob_policy().max_retries == 0
        assert get_game_history_config().batch_size == 25

    def test_invalid_number(self, monkeypatch):
        """Non-numeric values are a configuration error."""
        monkeypatch.setenv("OGDA_MAX_BLOB_SIZE", "big")
        with pytest.raises(ConfigurationError):
            get_blob_policy()

    def test_invalid_policy_values(self):
        """Out of range values are rejected."""
        with pytest.raises(ConfigurationError):
            BlobPolicy(max_blob_size=0)
        with pytest.raises(ConfigurationError):
            BlobPolicy(max_retries=-1)
        with pytest.raises(ConfigurationError):
            GameHistoryConfig(batch_size=0)

    def test_load_env_file(self, tmp_path):
        """A .env file seeds the environment."""
        env_file = tmp_path / ".env"
        env_file.write_text("OGDA_GAME_BATCH_SIZE=7\n")
        try:
            assert load_env(str(env_file)) is True
            assert get_game_history_config().batch_size == 7
        finally:
            os.environ.pop("OGDA_GAME_BATCH_SIZE", None)



class TestParseEndpoint:
    """Test DA client URL parsing."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("http://localhost:51001", ("localhost", 51001)),
            ("https://da.example.com:443", ("da.example.com", 443)),
            ("10.0.0.5:6000", ("10.0.0.5", 6000)),
            ("da-node", ("da-node", 51001)),
        ],
    )
    def test_valid(self, url, expected):
        """Host and port are extracted."""
        assert parse_endpoint(url) == expected

    @pytest.mark.parametrize("url", ["", "   ", "http://:51001", "http://host:notaport"])
    def test_invalid(self, url):
        """Malformed URLs are a configuration error."""
        with pytest.raises(ConfigurationError):
            parse_endpoint(url)


class TestHashing:
    """Test keccak helpers."""

    def test_keccak_of_empty(self):
        """keccak256 of empty input is the well-known constant."""
        assert keccak256_hex(b"") == (
            "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_reference_hash_is_of_request_id(self):
        """The reference hash is keccak of the request id text."""
        assert blob_reference_hash("req-1") == keccak256_hex(b"req-1")
