"""Build workspace: glob listing over a root directory.

Patterns are relative to the workspace root and follow pathlib glob
syntax ("**" spans directories). A single pattern string may hold
several comma-separated patterns, as CI report fields usually do.
"""

from pathlib import Path
from typing import Iterable, Iterator

from themis_notifier.reporting.types import EnumerationError


def split_patterns(patterns: Iterable[str]) -> list[str]:
    """Flatten comma-separated pattern strings, dropping blanks and duplicates."""
    result: list[str] = []
    for entry in patterns:
        for pattern in entry.split(","):
            pattern = pattern.strip()
            if pattern and pattern not in result:
                result.append(pattern)
    return result


class Workspace:
    """A directory tree holding a build's report files."""

    def __init__(self, root: Path):
        self.root = Path(root)

    @property
    def remote_path(self) -> str:
        return str(self.root.resolve())

    def iter_matches(self, patterns: Iterable[str]) -> Iterator[Path]:
        """Yield each file matching any pattern once, in sorted order per pattern.

        Raises EnumerationError when the workspace cannot be listed.
        """
        if not self.root.is_dir():
            raise EnumerationError(f"Workspace {self.root} is not a directory")

        seen: set[Path] = set()
        for pattern in split_patterns(patterns):
            try:
                matches = sorted(self.root.glob(pattern))
            except (OSError, ValueError, NotImplementedError) as exc:
                raise EnumerationError(
                    f"Cannot list {pattern!r} in {self.root}: {exc}"
                ) from exc
            for path in matches:
                if path in seen or not path.is_file():
                    continue
                seen.add(path)
                yield path

    def has_matches(self, patterns: Iterable[str]) -> bool:
        for _ in self.iter_matches(patterns):
            return True
        return False

    def relative_name(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()
