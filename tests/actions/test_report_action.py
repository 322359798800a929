"""Tests for ReportAction: instance lookup, metadata and fail-build policy."""

import json
from unittest.mock import patch

import pytest

from conftest import TEST_API_KEY, TEST_URL, MockThemis, parse_multipart
from themis_notifier.actions.report import ReportAction
from themis_notifier.actions.types import ReportFile
from themis_notifier.core.config import Settings, ThemisInstance
from themis_notifier.reporting.metadata import BuildRun


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        instances=[ThemisInstance(name="local", url=TEST_URL, api_key=TEST_API_KEY)],
    )


@pytest.fixture
def run():
    return BuildRun(
        start_time_millis=1_000,
        environment=lambda: {"GIT_COMMIT": "abc", "GIT_BRANCH": "main"},
    )


def _perform(action, settings, run, workspace, themis):
    with patch("themis_notifier.actions.report.build_client", lambda s: themis.client()):
        return action.perform(settings, run, workspace)


class TestReportAction:
    def test_add_report_groups_paths_by_type(self):
        action = ReportAction("local", "src")
        action.add_report_file(ReportFile("cobertura", "a.xml"))
        action.add_report({"type": "cobertura", "path": "b.xml"})
        action.add_report({"type": "pmd", "path": "pmd.xml"})

        assert action.reports == {"cobertura": ["a.xml", "b.xml"], "pmd": ["pmd.xml"]}

    def test_sends_each_type(self, settings, run, workspace):
        themis = MockThemis(expected_path="/api/reportFiles/src", body='{"dataDisplayed": "2 files"}')
        action = ReportAction("local", "src")
        action.add_report_file(ReportFile("cobertura", "**/cobertura.xml"))
        action.add_report_file(ReportFile("pmd", "build/pmd.xml"))

        report = _perform(action, settings, run, workspace, themis)

        assert not report.fatal
        assert sorted(line.message for line in report.lines) == [
            "report sent: cobertura (2 files)",
            "report sent: pmd (2 files)",
        ]
        sent = {
            json.loads(parse_multipart(r)["metadata"].data)["dataType"]: r
            for r in themis.requests
        }
        assert set(sent) == {"cobertura", "pmd"}
        metadata = json.loads(parse_multipart(sent["pmd"])["metadata"].data)
        assert metadata["commit"] == "abc"
        assert metadata["branch"] == "main"
        assert metadata["executionDate"] == 1_000

    def test_missing_files_are_not_fatal(self, settings, run, workspace):
        themis = MockThemis()
        action = ReportAction("local", "src", fail_build=True)
        action.add_report_file(ReportFile("checkstyle", "*.nope"))

        report = _perform(action, settings, run, workspace, themis)

        assert not report.fatal
        assert report.lines[0].message == "no files for: checkstyle"
        assert themis.requests == []

    def test_service_failure_fatal_with_fail_build(self, settings, run, workspace):
        themis = MockThemis(status=500, body="boom")
        action = ReportAction("local", "src", fail_build=True)
        action.add_report_file(ReportFile("pmd", "build/pmd.xml"))

        report = _perform(action, settings, run, workspace, themis)

        assert report.fatal
        assert "pmd" in report.message
        assert "500" in report.message

    def test_service_failure_logged_without_fail_build(self, settings, run, workspace):
        themis = MockThemis(status=500, body="boom")
        action = ReportAction("local", "src")
        action.add_report_file(ReportFile("pmd", "build/pmd.xml"))

        report = _perform(action, settings, run, workspace, themis)

        assert not report.fatal
        assert len(report.errors) == 1

    @pytest.mark.parametrize("fail_build", [True, False])
    def test_unknown_instance(self, settings, run, workspace, fail_build):
        action = ReportAction("nowhere", "src", fail_build=fail_build)
        action.add_report_file(ReportFile("pmd", "build/pmd.xml"))

        report = action.perform(settings, run, workspace)

        assert report.fatal is fail_build
        assert "nowhere" in report.errors[0].message

    def test_caller_env_vars_skip_environment_lookup(self, settings, workspace):
        def explode():
            raise AssertionError("environment must not be resolved")

        themis = MockThemis()
        action = ReportAction("local", "src", env_vars={"SVN_REVISION": "77"})
        action.add_report_file(ReportFile("pmd", "build/pmd.xml"))

        _perform(action, settings, BuildRun(start_time_millis=5, environment=explode), workspace, themis)

        metadata = json.loads(parse_multipart(themis.requests[0])["metadata"].data)
        assert metadata["commit"] == "77"
        assert "branch" not in metadata
