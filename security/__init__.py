"""
Security Module
===============

Authentication and caller identity.
"""

from security.auth import APIKeyAuth, Caller, generate_api_key, get_caller, revoke_api_key

__all__ = [
    "APIKeyAuth",
    "Caller",
    "get_caller",
    "generate_api_key",
    "revoke_api_key",
]
