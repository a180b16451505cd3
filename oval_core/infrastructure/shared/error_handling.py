"""
Shared Error Handling Utilities - Error kinds and consistent error logging.

Every run-level failure of the evaluation workflow is expressed as one of the
OvalError subclasses below. A FALSE, UNKNOWN or ERROR verdict for a single
definition is never an exception; it is recorded and only affects the
aggregate success policy.
"""

import logging
import traceback
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type
from enum import Enum
from contextlib import contextmanager


class OvalError(Exception):
    """
    Base class for run-level failures.

    Args:
        message: Human readable summary ("Failed to import ...")
        code: Underlying error code supplied by the failing component
        description: Underlying error description supplied by the failing component
    """

    def __init__(self, message: str, code: Optional[int] = None, description: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.description = description

    def diagnostic_lines(self) -> List[str]:
        """Lines printed to the error stream when this error ends a run."""
        lines = []
        if self.description:
            if self.code is not None:
                lines.append(f"Error: ({self.code}) {self.description}")
            else:
                lines.append(f"ERROR: {self.description}")
        lines.append(self.message)
        return lines


class ValidationError(OvalError):
    """Schema/structure check of an input document failed before import."""
    pass


class ModelImportError(OvalError):
    """A definitions, system characteristics or results document could not be imported."""
    pass


class SessionError(OvalError):
    """An evaluation session could not be created or was used after release."""
    pass


class ProbeError(OvalError):
    """A live collection stage (system info or object query) failed."""
    pass


class EngineError(OvalError):
    """The evaluation engine could not produce a verdict at all."""
    pass


class ExportError(OvalError):
    """A results or system characteristics document could not be written."""
    pass


class ReportError(OvalError):
    """The external report transform failed."""
    pass


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Context information for error handling."""
    operation: str
    component: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ErrorInfo:
    """Information about an error that occurred."""
    severity: ErrorSeverity
    message: str
    exception: Optional[Exception]
    context: ErrorContext
    stack_trace: Optional[str] = None

    def __post_init__(self):
        if self.exception and not self.stack_trace:
            self.stack_trace = traceback.format_exc()


class ErrorLogger:
    """Logs ErrorInfo records with their operation and component."""

    def __init__(self, logger_name: str = "error.handler"):
        self.logger = logging.getLogger(logger_name)

    def handle(self, error_info: ErrorInfo) -> None:
        """Log the error with appropriate severity."""
        log_message = f"[{error_info.context.component}] {error_info.context.operation}: {error_info.message}"
        if error_info.context.metadata:
            log_message += f" | Metadata: {error_info.context.metadata}"

        if error_info.severity == ErrorSeverity.DEBUG:
            self.logger.debug(log_message)
        elif error_info.severity == ErrorSeverity.INFO:
            self.logger.info(log_message)
        elif error_info.severity == ErrorSeverity.WARNING:
            self.logger.warning(log_message)
        elif error_info.severity == ErrorSeverity.ERROR:
            self.logger.error(log_message, exc_info=error_info.exception)
        else:
            self.logger.critical(log_message, exc_info=error_info.exception)


# Global error logger instance
_error_logger = ErrorLogger()


@contextmanager
def error_context(operation: str, component: str,
                  wrap: Optional[Type[OvalError]] = None,
                  message: Optional[str] = None,
                  **metadata):
    """
    Context manager for consistent error logging.

    Exceptions raised inside the block are logged with the operation and
    component, then re-raised. When ``wrap`` is given, exceptions that are not
    already OvalErrors are re-raised as ``wrap(message)`` chained to the cause,
    with the cause's text as description.
    """
    context = ErrorContext(operation=operation, component=component, metadata=metadata)

    try:
        yield context
    except OvalError as e:
        # OvalErrors are reported by the caller; logged without traceback
        _error_logger.handle(ErrorInfo(
            severity=ErrorSeverity.WARNING,
            message=str(e),
            exception=e,
            context=context
        ))
        raise
    except Exception as e:
        _error_logger.handle(ErrorInfo(
            severity=ErrorSeverity.ERROR if wrap is None else ErrorSeverity.WARNING,
            message=str(e),
            exception=e,
            context=context
        ))
        if wrap is None:
            raise
        code = getattr(e, "errno", None)
        description = getattr(e, "strerror", None) or str(e)
        raise wrap(message or f"{operation} failed", code=code, description=description) from e
