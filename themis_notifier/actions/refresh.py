"""Refresh action: triggers a Themis project refresh."""

from typing import Optional

from themis_notifier.actions.base import ThemisAction
from themis_notifier.core.config import Settings, ThemisInstance
from themis_notifier.core.http import build_client
from themis_notifier.reporting.aggregator import INFO, AggregateReport
from themis_notifier.reporting.metadata import BuildRun
from themis_notifier.reporting.workspace import Workspace
from themis_notifier.service.refresh import refresh_project


class RefreshAction(ThemisAction):
    def __init__(self, instance_name: str, project_key: str, fail_build: bool = False):
        super().__init__(instance_name, fail_build)
        self.project_key = project_key

    def do_perform(
        self,
        instance: ThemisInstance,
        settings: Settings,
        run: BuildRun,
        workspace: Optional[Workspace],
    ) -> AggregateReport:
        report = AggregateReport()
        with build_client(settings) as client:
            result = refresh_project(client, instance, self.project_key)

        if result.is_success:
            report.add(INFO, _refreshed_message(result.data_displayed))
        elif result.status_code is None:
            report.fail(
                f"Unknown error while refreshing on Themis instance {instance.name}",
                self.fail_build,
                str(result.error),
            )
        elif result.status_code != 200:
            report.fail(
                f"error refreshing project: HTTP {result.status_code} {result.body}",
                self.fail_build,
            )
        else:
            report.fail(
                f"unreadable refresh response: {result.body}",
                self.fail_build,
                str(result.error),
            )
        return report


def _refreshed_message(data_displayed: Optional[str]) -> str:
    if data_displayed is None:
        return "project refreshed"
    return f"project refreshed: {data_displayed}"
