"""Serialise assembled modules and write them atomically.

Each output file is written to a temporary file in the destination
directory and renamed over the target only once it is complete, so a crash
mid-write never leaves a truncated test module behind. The temporary file
is closed and removed on every failure path.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import libcst as cst

logger = logging.getLogger(__name__)

TEST_SUFFIX = "_test"
SOURCE_EXTENSION = ".py"


def output_filename(version: str, base: str) -> str:
    """Name of the generated file for *version*.

    ``_test`` is appended to *base* unless it already ends with it::

        output_filename("v1", "login") == "v1_login_test.py"
        output_filename("v1", "login_test") == "v1_login_test.py"
    """
    if not base.endswith(TEST_SUFFIX):
        base += TEST_SUFFIX
    return f"{version}_{base}{SOURCE_EXTENSION}"


def write_atomic(path: Path, text: str) -> None:
    """Write *text* to *path* using a temp file in the same directory plus rename.

    I/O errors propagate unchanged.
    """
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
        fd.write(text)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in the handler
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def emit(module: cst.Module, output_dir: Path, version: str, base: str) -> Path:
    """Format *module* and write it as *version*'s output file.

    Returns:
        The path of the written file.
    """
    path = output_dir / output_filename(version, base)
    write_atomic(path, module.code)
    logger.debug("Wrote %s", path)
    return path
