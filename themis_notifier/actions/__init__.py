"""Actions run by a CI step: report upload and project refresh."""

from themis_notifier.actions.refresh import RefreshAction
from themis_notifier.actions.report import ReportAction
from themis_notifier.actions.types import ReportFile

__all__ = ["RefreshAction", "ReportAction", "ReportFile"]
