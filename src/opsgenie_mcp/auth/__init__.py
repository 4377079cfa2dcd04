"""
Opsgenie credential handling.

Resolves the per-call API key from tool arguments, HTTP request
headers/query parameters and the process-wide default.
"""

from .credentials import (
    API_KEY_ENV_VAR,
    API_KEY_HEADER,
    API_KEY_QUERY_PARAM,
    REQUEST_STATE_KEY,
    CredentialError,
    bearer_token,
    credential_from_request,
    load_api_key_from_env,
    require_credential,
    resolve_credential,
)

__all__ = [
    "API_KEY_ENV_VAR",
    "API_KEY_HEADER",
    "API_KEY_QUERY_PARAM",
    "REQUEST_STATE_KEY",
    "CredentialError",
    "bearer_token",
    "credential_from_request",
    "load_api_key_from_env",
    "require_credential",
    "resolve_credential",
]
