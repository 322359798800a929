"""Result types for the non-report Themis endpoints."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class RefreshResult:
    """Outcome of a project refresh request.

    Successful only on HTTP 200; `data_displayed` then holds the
    service's summary of the refreshed data.
    """

    project_key: str
    status_code: Optional[int] = None
    body: str = ""
    data_displayed: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def is_success(self) -> bool:
        return self.error is None and self.status_code == 200


@dataclass
class ConnectionCheck:
    ok: bool
    message: str
    status_code: Optional[int] = None
