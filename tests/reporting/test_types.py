"""Unit tests for dispatch result types."""

from themis_notifier.reporting.types import (
    Aborted,
    BuildMetadata,
    Failed,
    ServiceFailure,
    Success,
    TransportError,
)


class TestResults:
    def test_success_and_aborted_are_not_errors(self):
        assert Success(category="a").is_success
        assert Aborted(category="a").is_success

    def test_failed_exposes_service_status(self):
        failed = Failed(category="a", cause=ServiceFailure(status_code=502, body="gateway"))

        assert not failed.is_success
        assert failed.status_code == 502
        assert failed.body == "gateway"

    def test_failed_with_exception_has_no_status(self):
        failed = Failed(category="a", cause=TransportError("down"))

        assert failed.status_code is None
        assert failed.body is None

    def test_service_failure_str(self):
        assert str(ServiceFailure(404, "missing")) == "HTTP 404: missing"


class TestBuildMetadataJson:
    def test_optional_fields_omitted(self):
        metadata = BuildMetadata(execution_timestamp_millis=1, workspace_remote_path="/w")
        assert metadata.to_json() == {"executionDate": 1, "dataWorkspace": "/w"}

    def test_to_json_returns_fresh_dict(self):
        metadata = BuildMetadata(execution_timestamp_millis=1, workspace_remote_path="/w")
        assert metadata.to_json() is not metadata.to_json()
