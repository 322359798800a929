"""Connection test against a Themis instance's /api/testConnection."""

import logging

import httpx

from themis_notifier.core.http import api_key_headers
from themis_notifier.service.types import ConnectionCheck

logger = logging.getLogger(__name__)

TEST_URL_FORMAT = "{url}/api/testConnection"

# Older instances lack the endpoint (404) or fail it with 500 on a bad key
OK_STATUSES = {200, 404}
AUTH_ERROR_STATUSES = {401, 403, 500}


def check_connection(client: httpx.Client, url: str, api_key: str) -> ConnectionCheck:
    test_url = TEST_URL_FORMAT.format(url=url.rstrip("/"))
    try:
        response = client.get(test_url, headers=api_key_headers(api_key))
    except httpx.HTTPError as exc:
        logger.warning("Connection test to %s failed: %s", url, exc)
        return ConnectionCheck(ok=False, message=f"Connection failed: {exc}")

    status = response.status_code
    if status in OK_STATUSES:
        return ConnectionCheck(ok=True, message="Connection OK", status_code=status)
    if status in AUTH_ERROR_STATUSES:
        return ConnectionCheck(
            ok=False, message="Authentication error: check the API key", status_code=status,
        )
    return ConnectionCheck(
        ok=False, message=f"Validation failed with HTTP status {status}", status_code=status,
    )
