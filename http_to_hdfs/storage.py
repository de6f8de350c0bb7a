"""
Destination filesystem for fetched data.

Paths are resolved through fsspec, so a local path, file://, memory:// or
hdfs:// (needs pyarrow) all go through the same open-write-close calls.
"""
from contextlib import contextmanager
from pathlib import PurePosixPath
from typing import BinaryIO, Iterator

import fsspec
import structlog

logger = structlog.get_logger(__name__)


class FileSink:
    """Write-or-overwrite byte sink for a single destination path."""

    def __init__(self, path: str, storage_options: dict = None):
        self.path = path
        self.fs, self.fs_path = fsspec.core.url_to_fs(path, **(storage_options or {}))

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        """Open the destination for writing, truncating any existing content."""
        parent = str(PurePosixPath(self.fs_path).parent)
        if parent and parent not in (".", "/"):
            self.fs.makedirs(parent, exist_ok=True)

        logger.debug("destination_opened", path=self.path)
        with self.fs.open(self.fs_path, "wb") as stream:
            yield stream

