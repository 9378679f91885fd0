"""Method URL construction."""

import os

CODE_ASSIST_ENDPOINT = "https://cloudcode-pa.googleapis.com"
CODE_ASSIST_API_VERSION = "v1internal"
ENDPOINT_ENV_VAR = "CODE_ASSIST_ENDPOINT"


def resolve_endpoint(endpoint_override: str | None = None) -> str:
    """Get the base endpoint.

    Resolution order (evaluated on every call):
    1. Explicit override (from configuration)
    2. CODE_ASSIST_ENDPOINT environment variable
    3. The production endpoint
    """
    if endpoint_override:
        return endpoint_override
    return os.environ.get(ENDPOINT_ENV_VAR) or CODE_ASSIST_ENDPOINT


def get_method_url(method: str, *, endpoint_override: str | None = None) -> str:
    """Build ``{endpoint}/{api_version}:{method}``."""
    endpoint = resolve_endpoint(endpoint_override)
    return f"{endpoint}/{CODE_ASSIST_API_VERSION}:{method}"
