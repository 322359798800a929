"""Unit tests for the connection test status mapping."""

import httpx
import pytest

from themis_notifier.service.connection import check_connection


def _client(status):
    seen = []

    def handle(request):
        seen.append(request)
        return httpx.Response(status, text="")

    return httpx.Client(transport=httpx.MockTransport(handle)), seen


class TestCheckConnection:
    @pytest.mark.parametrize("status", [200, 404])
    def test_ok_statuses(self, status):
        client, _ = _client(status)
        with client:
            result = check_connection(client, "http://themis.local/", "key")
        assert result.ok
        assert result.status_code == status

    @pytest.mark.parametrize("status", [401, 403, 500])
    def test_authentication_errors(self, status):
        client, _ = _client(status)
        with client:
            result = check_connection(client, "http://themis.local", "key")
        assert not result.ok
        assert "Authentication" in result.message

    def test_other_status_is_validation_failure(self):
        client, _ = _client(418)
        with client:
            result = check_connection(client, "http://themis.local", "key")
        assert not result.ok
        assert "418" in result.message

    def test_request_shape(self):
        client, seen = _client(200)
        with client:
            check_connection(client, "http://themis.local/", "key")
        assert str(seen[0].url) == "http://themis.local/api/testConnection"
        assert seen[0].headers["themis-api-key"] == "key"

    def test_unreachable(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused")

        with httpx.Client(transport=httpx.MockTransport(refuse)) as client:
            result = check_connection(client, "http://themis.local", "key")
        assert not result.ok
        assert result.status_code is None
