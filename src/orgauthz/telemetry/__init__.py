"""Telemetry for orgauthz.

Structure:
    audit/            - Denial audit trail (JSONL)
    models/           - Pydantic event models
"""
