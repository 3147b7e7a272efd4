"""Error kinds and per-file error handling for the bundler.

Packing isolates failures per file: a file that cannot be read is logged and
skipped so one bad entry never aborts a large walk. Every other failure is
raised as one of the ``BundleError`` subclasses below and ends the command.
"""

import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar('T')


class BundleError(Exception):
    """Base exception for bundling and unbundling errors."""
    pass


class NotFoundError(BundleError):
    """Root directory, bundle, manifest or part file does not exist."""
    pass


class ReadError(BundleError):
    """A single file could not be read during a walk."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Could not read file {path}{detail}")


class ParseError(BundleError):
    """Structured input (bundle, manifest or config) is malformed."""
    pass


class WriteError(BundleError):
    """A file could not be written while unpacking or saving output."""
    pass


class CapacityWarning(BundleError):
    """Clipboard payload exceeds the configured size limit."""

    def __init__(self, size_bytes: int, limit_bytes: int):
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"Content is too large ({size_bytes} bytes) to copy to clipboard "
            f"(limit {limit_bytes} bytes)"
        )


class ClipboardError(BundleError):
    """No clipboard tool is available or the copy command failed."""
    pass


class ErrorSeverity(Enum):
    """Error severity levels for consistent error classification."""
    LOW = "low"           # Skipped with a warning
    HIGH = "high"         # Aborts the current command


@dataclass
class ErrorContext:
    """Context information for error reporting and debugging."""
    operation: str
    component: str
    file_path: Optional[str] = None
    additional_info: Optional[Dict[str, Any]] = None
    severity: ErrorSeverity = ErrorSeverity.LOW


class ErrorHandler:
    """Runs file operations with a fallback and keeps a tally of failures."""

    def __init__(self, component_name: str = "Bundler"):
        self.component_name = component_name
        self._error_counts: Dict[str, int] = {}

    def safe_file_operation(
        self,
        file_path: str,
        operation: Callable[[], T],
        fallback_value: T,
        operation_name: str = "read_file",
    ) -> T:
        """Run a file operation, returning ``fallback_value`` on ``OSError``.

        Args:
            file_path: Path reported in the warning (relative to the pack root)
            operation: Zero-argument callable performing the I/O
            fallback_value: Value to return if the operation fails
            operation_name: Name recorded in the error context

        Returns:
            Result of the operation or the fallback value on error
        """
        context = ErrorContext(
            operation=operation_name,
            component=self.component_name,
            file_path=file_path,
        )
        try:
            return operation()
        except OSError as e:
            self._increment_error_count(type(e).__name__)
            self._log_error(ReadError(file_path, e), context)
            return fallback_value

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of errors encountered.

        Returns:
            Dictionary with error statistics
        """
        return {
            'total_errors': sum(self._error_counts.values()),
            'error_counts': self._error_counts.copy(),
        }

    def _log_error(self, error: Exception, context: Optional[ErrorContext] = None):
        """Log error with context information."""
        if context:
            logger.warning(
                f"{error}. Skipping.",
                extra={
                    'component': context.component,
                    'operation': context.operation,
                    'file_path': context.file_path,
                    'severity': context.severity.value,
                }
            )
        else:
            logger.warning(f"Error in {self.component_name}: {error}")

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Stack trace: {traceback.format_exc()}")

    def _increment_error_count(self, error_type: str):
        """Track error frequency for the pack summary."""
        self._error_counts[error_type] = self._error_counts.get(error_type, 0) + 1
