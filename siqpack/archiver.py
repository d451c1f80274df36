#!/usr/bin/env python3
"""
archiver.py

Build a package archive from a directory tree.
"""

from __future__ import annotations

import zipfile
from pathlib import Path

from siqpack.errors import ArchiveError


def build_archive(source_dir: Path, output_path: Path, compress_level: int = 9) -> int:
    """
    Zip every file below source_dir into output_path.

    Entries are written in sorted order with '/'-separated names relative
    to source_dir, so the same tree always gives the same archive layout.

    Returns:
        Number of files written

    Raises:
        ArchiveError: The archive could not be written
    """
    files = sorted(p for p in source_dir.rglob("*") if p.is_file())
    partial = output_path.with_name(output_path.name + ".part")
    try:
        with zipfile.ZipFile(
            partial, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=compress_level
        ) as zf:
            for file_path in files:
                zf.write(file_path, file_path.relative_to(source_dir).as_posix())
        partial.replace(output_path)
    except OSError as e:
        partial.unlink(missing_ok=True)
        raise ArchiveError(
            message=f"Failed to write {output_path.name}",
            suggestion="Check free disk space and write permission next to the input package",
            context={"output": str(output_path), "source_dir": str(source_dir)},
            cause=e,
        )
    return len(files)
