#!/usr/bin/env python3

"""
path_utils.py - Shared path utilities for siqpack

Resolves the input package path and derives the sibling working
directory and output archive from it.
"""

from pathlib import Path
from typing import Optional

from siqpack.errors import package_not_found_error, unsupported_extension_error


def resolve_package_path(raw_path: str, extension: str = ".siq", cwd: Optional[Path] = None) -> Path:
    """
    Resolve a user-supplied package path.

    The extension is appended when missing. Fails before anything touches
    the disk when the extension is wrong or the file does not exist.

    Args:
        raw_path: Path as typed by the user, with or without extension
        extension: Expected package extension (e.g. ".siq")
        cwd: Base directory for relative paths (defaults to cwd)

    Returns:
        Absolute path to an existing package file

    Raises:
        InputValidationError: Wrong extension or missing file
    """
    path = Path(raw_path)
    if not path.suffix:
        path = path.with_name(path.name + extension)

    if path.suffix.lower() != extension.lower():
        raise unsupported_extension_error(path, extension)

    base = cwd or Path.cwd()
    resolved = (base / path).resolve()
    if not resolved.is_file():
        raise package_not_found_error(resolved)
    return resolved


def derive_work_dir(package_path: Path, suffix: str = "-temp") -> Path:
    """Sibling scratch directory, e.g. quiz.siq -> quiz-temp/."""
    return package_path.parent / f"{package_path.stem}{suffix}"


def derive_output_path(package_path: Path, suffix: str = "-optimized") -> Path:
    """Sibling output archive, e.g. quiz.siq -> quiz-optimized.siq."""
    return package_path.parent / f"{package_path.stem}{suffix}{package_path.suffix}"


def is_safe_path(base_dir: Path, target_path: Path) -> bool:
    """
    Check that target_path stays inside base_dir.

    SECURITY: Blocks archive entries like '../../etc/passwd' from
    escaping the working directory.
    """
    try:
        target_path.resolve().relative_to(base_dir.resolve())
        return True
    except ValueError:
        return False
