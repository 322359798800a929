"""Types for the report dispatch pipeline.

BuildMetadata describes the source-control state of one build.
Success, Aborted and Failed are the three outcomes of dispatching one
report category; exactly one is produced per requested category.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Union

# Keys of the metadata JSON object sent alongside each archive
COMMIT_ATTRIBUTE = "commit"
BRANCH_ATTRIBUTE = "branch"
EXECUTION_DATE_ATTRIBUTE = "executionDate"
DATA_WORKSPACE_ATTRIBUTE = "dataWorkspace"
DATA_TYPE_ATTRIBUTE = "dataType"


@dataclass(frozen=True)
class BuildMetadata:
    """Source-control and execution details of a single build.

    Frozen: per-category variants are produced with derive(), never by
    mutation, so concurrent uploads cannot see each other's data_type.
    """

    execution_timestamp_millis: int
    workspace_remote_path: str
    commit: Optional[str] = None
    branch: Optional[str] = None
    data_type: Optional[str] = None

    def derive(self, data_type: str) -> "BuildMetadata":
        return replace(self, data_type=data_type)

    def to_json(self) -> dict:
        """Return a fresh JSON-ready dict. Absent optional fields are omitted."""
        payload: dict = {}
        if self.commit is not None:
            payload[COMMIT_ATTRIBUTE] = self.commit
        if self.branch is not None:
            payload[BRANCH_ATTRIBUTE] = self.branch
        payload[EXECUTION_DATE_ATTRIBUTE] = self.execution_timestamp_millis
        payload[DATA_WORKSPACE_ATTRIBUTE] = self.workspace_remote_path
        if self.data_type is not None:
            payload[DATA_TYPE_ATTRIBUTE] = self.data_type
        return payload


@dataclass(frozen=True)
class ServiceFailure:
    """A non-200 answer from the service."""

    status_code: int
    body: str

    def __str__(self) -> str:
        return f"HTTP {self.status_code}: {self.body}"


@dataclass(frozen=True)
class UploadResponse:
    """Raw outcome of one upload request."""

    status_code: int
    body: str


@dataclass(frozen=True)
class Success:
    category: str
    http_status: int = 200
    body: str = ""

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Aborted:
    """No file matched the category's patterns. Not an error."""

    category: str

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed:
    category: str
    cause: Union[Exception, ServiceFailure] = field(compare=False)

    @property
    def is_success(self) -> bool:
        return False

    @property
    def status_code(self) -> Optional[int]:
        if isinstance(self.cause, ServiceFailure):
            return self.cause.status_code
        return None

    @property
    def body(self) -> Optional[str]:
        if isinstance(self.cause, ServiceFailure):
            return self.cause.body
        return None


DispatchResult = Union[Success, Aborted, Failed]


class ThemisError(Exception):
    """Base class for failures talking to a Themis instance."""


class EnumerationError(ThemisError):
    """Raised when the workspace cannot be listed for a category."""


class ArchiveError(ThemisError):
    """Raised when matched files cannot be read or compressed."""


class TransportError(ThemisError):
    """Raised when the service cannot be reached."""


class StreamClosedError(ThemisError):
    """Raised on an ArchiveStream end whose peer has been closed."""
