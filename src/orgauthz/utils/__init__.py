"""Shared utilities (file loading, logging setup, policy files)."""
