#!/usr/bin/env python3
"""
icons.py - Centralized icon/emoji definitions for siqpack console output

Usage:
    from siqpack.icons import SUCCESS, WARNING, log
    print(log(SUCCESS, "Archive written", prefix="archive"))

All unicode characters are defined here once. Never edit unicode
characters in other files - import from this module instead.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Icons:
    """
    Centralized icon definitions.

    Categories:
    - Status: SUCCESS, ERROR, WARNING, SKIP
    - Stages: WORKING, PACKAGE, ASSET, DELETE, SWEEP
    - Content: QUIZ, FILE
    """

    # =========================================================================
    # Status Icons
    # =========================================================================
    SUCCESS: str = "✅"      # Green checkmark - operation succeeded
    ERROR: str = "❌"        # Red X - operation failed
    WARNING: str = "⚠️"      # Warning triangle
    SKIP: str = "⏭️"         # Skip forward - skipped

    # =========================================================================
    # Stage Icons
    # =========================================================================
    WORKING: str = "⏳"      # Hourglass - stage in progress
    PACKAGE: str = "📦"     # Archive in/out
    ASSET: str = "🖼"       # Media asset/image
    DELETE: str = "🗑️"       # Trash can
    SWEEP: str = "🧹"       # Cleanup/sweep

    # =========================================================================
    # Content Icons
    # =========================================================================
    QUIZ: str = "❓"        # Quiz/question
    FILE: str = "📄"        # File


# Global singleton instance
icons = Icons()

# Also export individual icons for convenience
SUCCESS = icons.SUCCESS
ERROR = icons.ERROR
WARNING = icons.WARNING
SKIP = icons.SKIP
WORKING = icons.WORKING
PACKAGE = icons.PACKAGE
ASSET = icons.ASSET
DELETE = icons.DELETE
SWEEP = icons.SWEEP
QUIZ = icons.QUIZ
FILE = icons.FILE


# =========================================================================
# Output Helper Functions
# =========================================================================

def log(icon: str, message: str, prefix: str = "") -> str:
    """
    Format a log message with icon.

    Args:
        icon: Icon to display (use constants from this module)
        message: Message text
        prefix: Optional prefix tag like "extract" or "archive"

    Returns:
        Formatted string like "✅ Done!" or "[archive] ✅ Done!"

    Example:
        print(log(SUCCESS, "Upload complete"))
        print(log(SUCCESS, "Archive written", prefix="archive"))
    """
    if prefix:
        return f"[{prefix}] {icon} {message}"
    return f"{icon} {message}"


def log_success(message: str, prefix: str = "") -> str:
    """Format a success message."""
    return log(SUCCESS, message, prefix)


def log_warning(message: str, prefix: str = "") -> str:
    """Format a warning message."""
    return log(WARNING, message, prefix)


def format_size(num_bytes: int) -> str:
    """Human readable byte size, e.g. '1.5 MB'."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} GB"
