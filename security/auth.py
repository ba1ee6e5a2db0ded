"""
API Authentication
==================

API key authentication and caller identity for the chat API.
"""

import hashlib
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

from fastapi import HTTPException, Request, Security
from fastapi.security import APIKeyHeader

# API key header name
API_KEY_HEADER = "X-API-Key"

ADMIN_SCOPE = "admin"

# In production, store these securely (e.g., database, secrets manager)
_API_KEYS: dict[str, dict] = {}

# Development keys, accepted only outside production
_DEV_KEYS: dict[str, dict] = {
    "dev-key-12345": {"key_id": "dev", "scopes": ["query"]},
    "dev-admin-key-12345": {"key_id": "dev-admin", "scopes": ["query", ADMIN_SCOPE]},
}


@dataclass(frozen=True)
class Caller:
    """Identity of the requester, resolved once per request."""

    caller_id: str
    scopes: frozenset[str] = field(default_factory=frozenset)

    @property
    def privileged(self) -> bool:
        """Administrators may issue write statements."""
        return ADMIN_SCOPE in self.scopes


class APIKeyAuth:
    """
    API Key authentication handler.

    Resolves the X-API-Key header into a Caller. Keys carry scopes and an
    optional expiration.
    """

    def __init__(self, environment: Optional[str] = None):
        """
        Initialize API key authentication.

        Args:
            environment: Deployment environment (default: the app settings);
                development keys are refused in production
        """
        self.environment = environment

    async def __call__(
        self,
        request: Request,
        api_key: Annotated[Optional[str], Security(APIKeyHeader(name=API_KEY_HEADER, auto_error=False))] = None,
    ) -> Caller:
        """
        Validate the API key.

        Returns:
            The resolved Caller

        Raises:
            HTTPException: If authentication fails
        """
        if api_key is None:
            raise HTTPException(
                status_code=401,
                detail={
                    "error": "AuthenticationRequired",
                    "message": f"Missing {API_KEY_HEADER} header",
                },
            )

        key_data = self._validate_key(api_key, self._is_production(request))
        if key_data is None:
            raise HTTPException(
                status_code=401,
                detail={
                    "error": "InvalidAPIKey",
                    "message": "Invalid or expired API key",
                },
            )

        caller = Caller(caller_id=key_data["key_id"], scopes=frozenset(key_data.get("scopes", [])))

        # Store caller in request state
        request.state.caller = caller

        return caller

    def _is_production(self, request: Request) -> bool:
        environment = self.environment or request.app.state.settings.environment
        return environment == "production"

    def _validate_key(self, api_key: str, production: bool) -> Optional[dict]:
        """
        Validate an API key.

        In production, this would check against a database.
        """
        key_data = _API_KEYS.get(self._hash_key(api_key))
        if key_data is None:
            if api_key in _DEV_KEYS and not production:
                return _DEV_KEYS[api_key]
            return None

        if key_data.get("expires_at"):
            if datetime.now(timezone.utc) > key_data["expires_at"]:
                return None

        return key_data

    @staticmethod
    def _hash_key(api_key: str) -> str:
        """Hash an API key for storage/lookup."""
        return hashlib.sha256(api_key.encode()).hexdigest()


def generate_api_key(
    key_id: str,
    scopes: list[str] = None,
    expires_in_days: int = None,
) -> str:
    """
    Generate a new API key.

    Args:
        key_id: Unique identifier for the key, used as the caller id
        scopes: List of allowed scopes (e.g., ["query", "admin"])
        expires_in_days: Days until expiration (None = no expiration)

    Returns:
        The generated API key (store securely - cannot be retrieved later)
    """
    api_key = f"sqlchat_{secrets.token_urlsafe(32)}"

    now = datetime.now(timezone.utc)
    expires_at = None
    if expires_in_days:
        expires_at = now + timedelta(days=expires_in_days)

    _API_KEYS[APIKeyAuth._hash_key(api_key)] = {
        "key_id": key_id,
        "scopes": scopes or ["query"],
        "created_at": now,
        "expires_at": expires_at,
    }

    return api_key


def revoke_api_key(api_key: str) -> bool:
    """
    Revoke an API key.

    Args:
        api_key: The API key to revoke

    Returns:
        True if key was revoked, False if not found
    """
    key_hash = APIKeyAuth._hash_key(api_key)
    if key_hash in _API_KEYS:
        del _API_KEYS[key_hash]
        return True
    return False


# Dependency for routes
api_key_auth = APIKeyAuth()


async def get_caller(
    request: Request,
    api_key: Annotated[Optional[str], Security(APIKeyHeader(name=API_KEY_HEADER, auto_error=False))] = None,
) -> Caller:
    """
    FastAPI dependency resolving the caller.

    Usage:
        @app.post("/chat")
        async def chat(caller: Caller = Depends(get_caller)):
            ...
    """
    return await api_key_auth(request, api_key)
