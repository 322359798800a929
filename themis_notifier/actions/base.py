"""Base for actions performed against a named Themis instance.

An action resolves its instance from Settings, does its work, and
returns an AggregateReport. It never raises to fail the build: the
caller checks `report.fatal` once and decides.
"""

from typing import Optional

from themis_notifier.core.config import Settings, ThemisInstance
from themis_notifier.reporting.aggregator import AggregateReport
from themis_notifier.reporting.metadata import BuildRun
from themis_notifier.reporting.workspace import Workspace


class ThemisAction:
    def __init__(self, instance_name: str, fail_build: bool = False):
        self.instance_name = instance_name
        self.fail_build = fail_build

    def perform(
        self,
        settings: Settings,
        run: BuildRun,
        workspace: Optional[Workspace] = None,
    ) -> AggregateReport:
        instance = settings.get_instance(self.instance_name)
        if instance is None:
            report = AggregateReport()
            report.fail(f"Unknown Themis instance: {self.instance_name}", self.fail_build)
            return report
        return self.do_perform(instance, settings, run, workspace)

    def do_perform(
        self,
        instance: ThemisInstance,
        settings: Settings,
        run: BuildRun,
        workspace: Optional[Workspace],
    ) -> AggregateReport:
        raise NotImplementedError
