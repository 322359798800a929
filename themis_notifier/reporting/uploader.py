"""Upload client: sends one category's archive to a Themis instance.

One multipart POST per category:
  archive   the zip stream (application/zip, filename archive.zip)
  metadata  the per-category BuildMetadata as JSON
"""

import json
import logging
from typing import BinaryIO

import httpx

from themis_notifier.core.config import ThemisInstance
from themis_notifier.core.http import api_key_headers
from themis_notifier.reporting.types import BuildMetadata, TransportError, UploadResponse

logger = logging.getLogger(__name__)

REPORT_URL_FORMAT = "{url}/api/reportFiles/{source_key}"
ARCHIVE_FIELD = "archive"
ARCHIVE_FILENAME = "archive.zip"
ARCHIVE_CONTENT_TYPE = "application/zip"
METADATA_FIELD = "metadata"
METADATA_CONTENT_TYPE = "application/json"


def report_url(instance: ThemisInstance, source_key: str) -> str:
    return REPORT_URL_FORMAT.format(url=instance.url, source_key=source_key)


def upload_report(
    client: httpx.Client,
    instance: ThemisInstance,
    source_key: str,
    metadata: BuildMetadata,
    archive: BinaryIO,
) -> UploadResponse:
    """POST the archive stream and its metadata; return status and body.

    `archive` is read incrementally and sent with chunked transfer
    encoding, so its length need not be known. Transport failures are
    raised as TransportError; any HTTP status is returned, not raised.
    """
    files = [
        (ARCHIVE_FIELD, (ARCHIVE_FILENAME, archive, ARCHIVE_CONTENT_TYPE)),
        (METADATA_FIELD, (None, json.dumps(metadata.to_json()), METADATA_CONTENT_TYPE)),
    ]
    url = report_url(instance, source_key)

    try:
        response = client.post(
            url,
            headers=api_key_headers(instance.api_key),
            files=files,
        )
    except httpx.HTTPError as exc:
        raise TransportError(
            f"Could not send {metadata.data_type} report to {instance.name}: {exc}"
        ) from exc

    logger.info(
        "Uploaded %s report to %s (status=%d)",
        metadata.data_type, url, response.status_code,
    )
    return UploadResponse(status_code=response.status_code, body=response.text)
