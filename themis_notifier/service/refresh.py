"""Project refresh: asks a Themis instance to recompute a project's data."""

import logging

import httpx

from themis_notifier.core.config import ThemisInstance
from themis_notifier.core.http import api_key_headers
from themis_notifier.service.types import RefreshResult

logger = logging.getLogger(__name__)

REFRESH_URL_FORMAT = "{url}/api/refreshProject/{project_key}"


def refresh_project(
    client: httpx.Client,
    instance: ThemisInstance,
    project_key: str,
) -> RefreshResult:
    """GET the refresh endpoint. Raises nothing; failures land in the result."""
    url = REFRESH_URL_FORMAT.format(url=instance.url, project_key=project_key)

    try:
        response = client.get(url, headers=api_key_headers(instance.api_key))
    except httpx.HTTPError as exc:
        logger.error("Refresh of %s on %s failed: %s", project_key, instance.name, exc)
        return RefreshResult(project_key=project_key, error=exc)

    result = RefreshResult(
        project_key=project_key,
        status_code=response.status_code,
        body=response.text,
    )
    if response.status_code != 200:
        logger.warning(
            "Refresh of %s rejected (status=%d)", project_key, response.status_code,
        )
        return result

    try:
        payload = response.json()
    except ValueError as exc:
        result.error = exc
        return result
    if isinstance(payload, dict) and "dataDisplayed" in payload:
        result.data_displayed = str(payload["dataDisplayed"])
    return result
