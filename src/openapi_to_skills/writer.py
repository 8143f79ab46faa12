"""Persist rendered Markdown: real filesystem writes or a dry-run record.

The converter only ever talks to a :class:`Writer`, which exposes two
operations: ``mkdir(path)`` and ``write_file(path, content)``. Two
implementations are provided:

* :class:`FileSystemWriter` -- creates directories recursively and writes
  each file atomically (temp file in the same directory, then rename).
* :class:`DryRunWriter` -- records every directory and file in memory and
  touches nothing on disk. Used by ``convert --dry-run`` and in tests.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from openapi_to_skills.exceptions import OutputError


@runtime_checkable
class Writer(Protocol):
    """Destination for the generated skill bundle."""

    def mkdir(self, path: Path) -> None: ...

    def write_file(self, path: Path, content: str) -> None: ...


class FileSystemWriter:
    """Write the bundle to disk.

    Raises:
        OutputError: From either method when the underlying ``OSError``
            occurs (permissions, read-only filesystem, disk full, ...).
    """

    def mkdir(self, path: Path) -> None:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputError(f"Cannot create directory {path}: {exc}") from exc

    def write_file(self, path: Path, content: str) -> None:
        try:
            atomic_write(Path(path), content)
        except OSError as exc:
            raise OutputError(f"Cannot write {path}: {exc}") from exc


class DryRunWriter:
    """Record what would be written without touching the filesystem.

    Attributes:
        directories: Every path passed to :meth:`mkdir`, in call order.
        files: Rendered content keyed by path, in write order.
    """

    def __init__(self) -> None:
        self.directories: list[Path] = []
        self.files: dict[Path, str] = {}

    def mkdir(self, path: Path) -> None:
        self.directories.append(Path(path))

    def write_file(self, path: Path, content: str) -> None:
        self.files[Path(path)] = content


def create_writer(dry_run: bool = False) -> Writer:
    """Return a :class:`DryRunWriter` when *dry_run*, else a :class:`FileSystemWriter`."""
    return DryRunWriter() if dry_run else FileSystemWriter()


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise
