"""
API token resolution.

Resolves the Pylon API token from:
1. Explicit value
2. Environment variable (``PYLON_TOKEN`` by default)
"""

from __future__ import annotations

import os

TOKEN_ENV = "PYLON_TOKEN"


def resolve_token(
    explicit_token: str | None = None,
    token_env: str = TOKEN_ENV,
) -> str | None:
    """Resolve the API token.

    Args:
        explicit_token: Explicitly provided token
        token_env: Environment variable to fall back to

    Returns:
        Resolved token or None if not found
    """
    if explicit_token:
        return explicit_token

    token = os.getenv(token_env)
    if token:
        return token.strip()

    return None


def get_auth_header(
    token: str | None = None,
    *,
    scheme: str | None = None,
    header_name: str = "Authorization",
) -> dict[str, str]:
    """Build the authentication header.

    Pylon expects the bare token in ``Authorization``; pass ``scheme`` (for
    example ``"Bearer"``) when talking to a proxy that wants one.

    Args:
        token: Explicit token (falls back to the environment)
        scheme: Optional auth scheme prefix
        header_name: Header to set

    Returns:
        Header dictionary (empty if no token is available)
    """
    resolved = resolve_token(token)
    if not resolved:
        return {}

    value = f"{scheme} {resolved}" if scheme else resolved
    return {header_name: value}
