# errors.py
"""
Custom exception classes with improved error messages for siqpack

All exceptions include:
- Clear error description
- Actionable suggestions
- Relevant context
"""
from pathlib import Path
from typing import Optional, Dict, Any


class SiqpackError(Exception):
    """Base exception for all siqpack errors"""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        self.cause = cause
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error with all details"""
        lines = [
            "",
            "=" * 70,
            f"❌ {self.__class__.__name__}",
            "=" * 70,
            "",
            self.message,
        ]

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestion:
            lines.append("")
            lines.append("💡 Suggestion:")
            lines.append(f"  {self.suggestion}")

        if self.cause:
            lines.append("")
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        lines.append("")
        lines.append("=" * 70)
        lines.append("")

        return "\n".join(lines)


class ConfigurationError(SiqpackError):
    """Configuration is missing or invalid"""
    pass


class InputValidationError(SiqpackError):
    """Input package path is unusable"""
    pass


class ExtractionError(SiqpackError):
    """Package archive could not be extracted"""
    pass


class DescriptorError(SiqpackError):
    """Package descriptor is missing or unreadable"""
    pass


class MalformedDescriptorError(DescriptorError):
    """Descriptor lacks a structurally required node"""

    def __init__(self, message: str, position: Optional[Dict[str, int]] = None, **kwargs):
        self.position = dict(position or {})
        context = dict(self.position)
        context.update(kwargs.pop("context", None) or {})
        super().__init__(message, context=context, **kwargs)


class OptimizationError(SiqpackError):
    """Asset optimization failed"""
    pass


class ArchiveError(SiqpackError):
    """Output archive could not be written"""
    pass


# Specific error factory functions

def unsupported_extension_error(path: Path, expected: str) -> InputValidationError:
    """Create error for an input with the wrong extension"""
    return InputValidationError(
        message=f"Unsupported file extension: {path.suffix}",
        suggestion=(
            f"Pass a quiz package ending in {expected}, or omit the extension:\n"
            f"  siqpack optimize {path.stem}"
        ),
        context={
            "path": str(path),
            "expected_extension": expected,
        }
    )


def package_not_found_error(path: Path) -> InputValidationError:
    """Create error when the input package does not exist"""
    return InputValidationError(
        message=f"Unable to locate file at {path}",
        suggestion="Check the path and run the command from the package's folder",
        context={
            "resolved_path": str(path),
        }
    )


def descriptor_not_found_error(descriptor: Path, work_dir: Path) -> DescriptorError:
    """Create error when the extracted package has no descriptor"""
    return DescriptorError(
        message=f"Descriptor {descriptor.name} not found in extracted package",
        suggestion=(
            "The archive does not look like a quiz package.\n"
            "Inspect the working directory to see what was extracted."
        ),
        context={
            "expected_path": str(descriptor),
            "work_dir": str(work_dir),
        }
    )


def missing_node_error(
    node: str,
    owner: str,
    position: Optional[Dict[str, int]] = None
) -> MalformedDescriptorError:
    """Create error for a required descriptor node that is absent"""
    where = describe_position(position)
    return MalformedDescriptorError(
        message=f"{owner} has no <{node}> element{where}",
        position=position,
        suggestion=(
            f"Add the <{node}> element to the descriptor, or re-save the\n"
            "  package from the editor to repair its structure"
        ),
    )


def invalid_number_error(
    field: str,
    value: Optional[str],
    position: Optional[Dict[str, int]] = None
) -> MalformedDescriptorError:
    """Create error for a numeric attribute that does not parse"""
    where = describe_position(position)
    return MalformedDescriptorError(
        message=f"Invalid {field} value {value!r}{where}",
        position=position,
        suggestion=f"Use a whole number for {field}",
    )


def describe_position(position: Optional[Dict[str, int]]) -> str:
    """Render a round/theme/question index path like ' at round[0]/theme[2]'."""
    if not position:
        return ""
    parts = [f"{key}[{index}]" for key, index in position.items()]
    return " at " + "/".join(parts)
