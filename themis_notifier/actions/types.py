"""Types for notifier actions: report file declarations."""

from collections.abc import Mapping
from dataclasses import dataclass

# Report types the Themis service knows how to parse (lower-case tags)
SUPPORTED_TYPES = ("Cobertura", "ReSharper", "PMD", "Checkstyle")

TYPE_KEY = "type"
PATH_KEY = "path"


def supported_type_tags() -> list[str]:
    return [t.lower() for t in SUPPORTED_TYPES]


@dataclass(frozen=True)
class ReportFile:
    """One report declaration: a type tag and a workspace glob."""

    type: str
    path: str

    def __post_init__(self) -> None:
        if not self.type or not self.type.strip():
            raise ValueError("Report type is required")
        if not self.path or not self.path.strip():
            raise ValueError("Report path is required")

    @classmethod
    def from_mapping(cls, report: Mapping[str, str]) -> "ReportFile":
        return cls(type=report.get(TYPE_KEY, ""), path=report.get(PATH_KEY, ""))

    @classmethod
    def parse(cls, declaration: str) -> "ReportFile":
        """Parse a TYPE=GLOB command-line argument."""
        type_, sep, path = declaration.partition("=")
        if not sep:
            raise ValueError(f"Expected TYPE=GLOB, got {declaration!r}")
        return cls(type=type_.strip(), path=path.strip())

