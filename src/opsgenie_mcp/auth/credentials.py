"""
Opsgenie credential resolution.

The server never stores API keys beyond a single call, except for the
process-wide default carried in ServerConfig. Each call resolves its key
from an ordered list of candidate sources and takes the first one present.

HTTP transport order: X-Opsgenie-Api-Key header > Authorization bearer
header > apiKey query parameter. The tool layer then falls back to the
explicit tool argument and finally the process default.
"""

import os
from typing import Mapping, Optional

API_KEY_ENV_VAR = "OPSGENIE_API_KEY"
"""Environment variable holding the process-wide default key."""

API_KEY_HEADER = "X-Opsgenie-Api-Key"
API_KEY_QUERY_PARAM = "apiKey"
REQUEST_STATE_KEY = "opsgenie_api_key"
"""Attribute on request.state where the HTTP entrypoint stores the resolved key."""


class CredentialError(Exception):
    """Raised when a credential is required but none can be resolved."""

    def __init__(self, message: str = "Opsgenie API key is required"):
        self.message = message
        super().__init__(message)


def resolve_credential(*candidates: Optional[str]) -> Optional[str]:
    """
    Return the first present credential, in priority order.

    Blank or whitespace-only candidates count as absent.

    Args:
        candidates: Candidate values, highest priority first

    Returns:
        The stripped credential, or None if every candidate is absent
    """
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return None


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an "Authorization: Bearer <token>" value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def credential_from_request(
    headers: Mapping[str, str],
    query_params: Mapping[str, str],
) -> Optional[str]:
    """
    Resolve a credential from an inbound HTTP request.

    Args:
        headers: Request headers (case-insensitive mapping, e.g. starlette Headers)
        query_params: Request query parameters

    Returns:
        The credential, or None if the request carries none
    """
    return resolve_credential(
        headers.get(API_KEY_HEADER),
        bearer_token(headers.get("Authorization")),
        query_params.get(API_KEY_QUERY_PARAM),
    )


def load_api_key_from_env() -> Optional[str]:
    """
    Load the default API key from the environment.

    Returns:
        The API key if OPSGENIE_API_KEY is set and non-blank, None otherwise
    """
    return resolve_credential(os.environ.get(API_KEY_ENV_VAR))


def require_credential(*candidates: Optional[str]) -> str:
    """
    Like resolve_credential, but raise when nothing resolves.

    Raises:
        CredentialError: If every candidate is absent
    """
    credential = resolve_credential(*candidates)
    if credential is None:
        raise CredentialError(
            "Opsgenie API key is required. Provide it via --api-key "
            f"or the {API_KEY_ENV_VAR} environment variable."
        )
    return credential
