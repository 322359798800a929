"""Archiver: zips a category's matched files into a byte sink.

The sink only needs write() and flush(); zipfile falls back to data
descriptors when it cannot seek, so the archive can go straight into
an ArchiveStream.
"""

import logging
import zipfile
from typing import BinaryIO, Iterable

from themis_notifier.reporting.types import ArchiveError, StreamClosedError
from themis_notifier.reporting.workspace import Workspace

logger = logging.getLogger(__name__)


def write_archive(workspace: Workspace, patterns: Iterable[str], sink: BinaryIO) -> int:
    """Write a deflated zip of every matching file into `sink`.

    Returns the number of archived files. Read and compression errors are
    raised as ArchiveError; StreamClosedError passes through untouched so
    the caller can tell a vanished consumer from a bad file.
    """
    count = 0
    try:
        with zipfile.ZipFile(sink, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
            for path in workspace.iter_matches(patterns):
                archive.write(path, arcname=workspace.relative_name(path))
                count += 1
    except StreamClosedError:
        raise
    except (OSError, zipfile.BadZipFile, ValueError) as exc:
        raise ArchiveError(f"Could not archive report files: {exc}") from exc

    logger.debug("Archived %d files from %s", count, workspace.root)
    return count
