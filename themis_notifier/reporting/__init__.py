"""Report dispatch: archive report files per category and upload them.

Public API:
    dispatch(categories, metadata_base, workspace, ...) -> list[DispatchResult]
    render(results, fail_build) -> AggregateReport
    MetadataBuilder().build(run, workspace) -> BuildMetadata
"""

from themis_notifier.reporting.aggregator import AggregateReport, render
from themis_notifier.reporting.dispatcher import dispatch
from themis_notifier.reporting.metadata import BuildRun, MetadataBuilder, derive_for
from themis_notifier.reporting.types import (
    Aborted,
    BuildMetadata,
    DispatchResult,
    Failed,
    ServiceFailure,
    Success,
)
from themis_notifier.reporting.workspace import Workspace

__all__ = [
    "dispatch",
    "render",
    "derive_for",
    "AggregateReport",
    "Aborted",
    "BuildMetadata",
    "BuildRun",
    "DispatchResult",
    "Failed",
    "MetadataBuilder",
    "ServiceFailure",
    "Success",
    "Workspace",
]
