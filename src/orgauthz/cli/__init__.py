"""Command-line interface for orgauthz.

Provides offline tooling for policy files: validation, request evaluation
and effective permission listing.
"""

from .main import cli, main

__all__ = ["cli", "main"]
