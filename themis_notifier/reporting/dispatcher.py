"""Report dispatch engine.

For each report category, concurrently:
1. Check the workspace for files matching the category's patterns.
   No match → Aborted, and nothing is sent.
2. Otherwise zip the matches into an ArchiveStream on one thread while
   another thread streams the read end into the multipart upload.
3. Reduce both outcomes into one DispatchResult.

Every failure is converted into a Failed result for its own category;
nothing raised here escapes dispatch() and no category affects another.
"""

import contextvars
import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, Mapping, Optional, Union

import httpx

from themis_notifier.core.config import ThemisInstance
from themis_notifier.reporting.archiver import write_archive
from themis_notifier.reporting.metadata import derive_for
from themis_notifier.reporting.stream import DEFAULT_CAPACITY, ArchiveStream
from themis_notifier.reporting.types import (
    Aborted,
    BuildMetadata,
    DispatchResult,
    EnumerationError,
    Failed,
    ServiceFailure,
    StreamClosedError,
    Success,
    UploadResponse,
)
from themis_notifier.reporting.uploader import upload_report
from themis_notifier.reporting.workspace import Workspace

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.Client]


def dispatch(
    categories: Mapping[str, Union[str, Iterable[str]]],
    metadata_base: BuildMetadata,
    workspace: Workspace,
    *,
    instance: ThemisInstance,
    source_key: str,
    client_factory: ClientFactory,
    max_workers: Optional[int] = None,
    capacity: int = DEFAULT_CAPACITY,
) -> list[DispatchResult]:
    """Archive and upload every category; return one result per category.

    Results come back in completion order. `max_workers` caps how many
    categories are in flight at once (default: all of them). A category
    given as a single string is one pattern. Workers run in a copy of the
    caller's context, so bound context variables reach their log lines.
    """
    if not categories:
        return []

    logger.info(
        "Dispatching %d report categories to %s (source=%s)",
        len(categories), instance.name, source_key,
    )
    results: list[DispatchResult] = []
    workers = max_workers or len(categories)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="themis-report") as executor:
        futures = {
            executor.submit(
                contextvars.copy_context().run,
                dispatch_category,
                category,
                _as_pattern_list(patterns),
                derive_for(metadata_base, category),
                workspace,
                instance=instance,
                source_key=source_key,
                client_factory=client_factory,
                capacity=capacity,
            ): category
            for category, patterns in categories.items()
        }
        for future in as_completed(futures):
            category = futures[future]
            try:
                results.append(future.result())
            except Exception as exc:
                logger.error("Unexpected failure dispatching %s: %s", category, exc)
                results.append(Failed(category=category, cause=exc))

    return results


def _as_pattern_list(patterns: Union[str, Iterable[str]]) -> list[str]:
    if isinstance(patterns, str):
        return [patterns]
    return list(patterns)


def dispatch_category(
    category: str,
    patterns: list[str],
    metadata: BuildMetadata,
    workspace: Workspace,
    *,
    instance: ThemisInstance,
    source_key: str,
    client_factory: ClientFactory,
    capacity: int = DEFAULT_CAPACITY,
) -> DispatchResult:
    """Dispatch a single category. Never raises."""
    try:
        if not workspace.has_matches(patterns):
            logger.info("No files match %s for %s", patterns, category)
            return Aborted(category=category)
    except EnumerationError as exc:
        return Failed(category=category, cause=exc)
    except OSError as exc:
        return Failed(category=category, cause=EnumerationError(str(exc)))

    return _archive_and_send(
        category, patterns, metadata, workspace,
        instance=instance,
        source_key=source_key,
        client_factory=client_factory,
        capacity=capacity,
    )


def _archive_and_send(
    category: str,
    patterns: list[str],
    metadata: BuildMetadata,
    workspace: Workspace,
    *,
    instance: ThemisInstance,
    source_key: str,
    client_factory: ClientFactory,
    capacity: int,
) -> DispatchResult:
    stream = ArchiveStream(capacity=capacity)

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix=f"themis-{category}") as executor:
        producer = executor.submit(
            contextvars.copy_context().run, _produce, workspace, patterns, stream,
        )
        consumer = executor.submit(
            contextvars.copy_context().run,
            _consume, client_factory, instance, source_key, metadata, stream,
        )
        return _reduce(category, producer, consumer)


def _produce(workspace: Workspace, patterns: list[str], stream: ArchiveStream) -> int:
    try:
        return write_archive(workspace, patterns, stream.writer)
    finally:
        stream.writer.close()


def _consume(
    client_factory: ClientFactory,
    instance: ThemisInstance,
    source_key: str,
    metadata: BuildMetadata,
    stream: ArchiveStream,
) -> UploadResponse:
    try:
        with client_factory() as client:
            return upload_report(client, instance, source_key, metadata, stream.reader)
    finally:
        stream.reader.close()


def _reduce(category: str, producer: Future, consumer: Future) -> DispatchResult:
    """Combine producer and consumer outcomes.

    A failed producer means a truncated archive, so it decides the result,
    unless it only failed because the consumer gave up first; then the
    consumer's own failure is the one worth reporting.
    """
    producer_error = producer.exception()
    consumer_error = consumer.exception()
    response: Optional[UploadResponse] = None if consumer_error else consumer.result()

    consumer_failed = consumer_error is not None or (
        response is not None and response.status_code != 200
    )
    if producer_error is not None and not (
        isinstance(producer_error, StreamClosedError) and consumer_failed
    ):
        logger.warning("Archiving %s failed: %s", category, producer_error)
        return Failed(category=category, cause=producer_error)

    if consumer_error is not None:
        logger.warning("Uploading %s failed: %s", category, consumer_error)
        return Failed(category=category, cause=consumer_error)

    if response.status_code == 200:
        return Success(category=category, http_status=200, body=response.body)

    logger.warning(
        "Service rejected %s report (status=%d)", category, response.status_code,
    )
    return Failed(
        category=category,
        cause=ServiceFailure(status_code=response.status_code, body=response.body),
    )
