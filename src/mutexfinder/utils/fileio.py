"""
Atomic file-write utilities.

Result files are first written to a temporary file in the destination
directory and then moved into place with ``os.replace()`` (POSIX rename
guarantee), so an interrupted run never leaves a half-written table.
Files already completed by a run remain in place if a later write fails.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterable


def atomic_write_text(path: str | os.PathLike, content: str) -> None:
    """Write *content* as UTF-8 text atomically via temp-file + rename.

    Parameters
    ----------
    path:
        Destination file path. Its directory must exist.
    content:
        Text content to write. Newlines are written as LF.
    """
    path = os.fspath(path)
    dir_path = os.path.dirname(path) or "."
    tmp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", dir=dir_path, suffix=".tmp", delete=False,
            encoding="utf-8", newline="\n",
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def atomic_write_lines(path: str | os.PathLike, lines: Iterable[str]) -> None:
    """Write *lines* joined by LF, with a trailing LF, atomically."""
    content = "".join(f"{line}\n" for line in lines)
    atomic_write_text(path, content)
