"""Logging, configuration and hashing helpers."""
