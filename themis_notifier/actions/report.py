"""Report action: sends report files from the workspace to Themis."""

from collections.abc import Mapping
from typing import Optional

from themis_notifier.actions.base import ThemisAction
from themis_notifier.actions.types import ReportFile
from themis_notifier.core.config import Settings, ThemisInstance
from themis_notifier.core.http import build_client
from themis_notifier.core.logging import bind_source_key, unbind_source_key
from themis_notifier.reporting.aggregator import AggregateReport, render
from themis_notifier.reporting.dispatcher import dispatch
from themis_notifier.reporting.metadata import BuildRun, MetadataBuilder
from themis_notifier.reporting.workspace import Workspace


class ReportAction(ThemisAction):
    """Archive and upload each report type for one Themis source."""

    def __init__(
        self,
        instance_name: str,
        source_key: str,
        fail_build: bool = False,
        env_vars: Optional[Mapping[str, str]] = None,
    ):
        super().__init__(instance_name, fail_build)
        self.source_key = source_key
        self.reports: dict[str, list[str]] = {}
        self._metadata_builder = MetadataBuilder(env_vars)

    def add_report_file(self, report_file: ReportFile) -> None:
        self.reports.setdefault(report_file.type, []).append(report_file.path)

    def add_report(self, report: Mapping[str, str]) -> None:
        """Add a report given as {"type": ..., "path": ...}."""
        self.add_report_file(ReportFile.from_mapping(report))

    def set_env_vars(self, env_vars: Mapping[str, str]) -> None:
        self._metadata_builder = MetadataBuilder(env_vars)

    def do_perform(
        self,
        instance: ThemisInstance,
        settings: Settings,
        run: BuildRun,
        workspace: Optional[Workspace],
    ) -> AggregateReport:
        if workspace is None:
            report = AggregateReport()
            report.fail("No workspace available to collect report files from", self.fail_build)
            return report

        token = bind_source_key(self.source_key)
        try:
            return self._report(instance, settings, run, workspace)
        finally:
            unbind_source_key(token)

    def _report(
        self,
        instance: ThemisInstance,
        settings: Settings,
        run: BuildRun,
        workspace: Workspace,
    ) -> AggregateReport:
        try:
            metadata = self._metadata_builder.build(run, workspace)
        except OSError as exc:
            report = AggregateReport()
            report.fail(
                f"Unknown error while reporting to Themis instance {instance.name}",
                self.fail_build,
                str(exc),
            )
            return report

        results = dispatch(
            self.reports,
            metadata,
            workspace,
            instance=instance,
            source_key=self.source_key,
            client_factory=lambda: build_client(settings),
            max_workers=settings.max_workers,
        )
        return render(results, self.fail_build)
