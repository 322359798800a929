"""Refresh and connection-test calls to a Themis instance."""

from themis_notifier.service.connection import check_connection
from themis_notifier.service.refresh import refresh_project

__all__ = ["check_connection", "refresh_project"]
