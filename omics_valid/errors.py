"""
Error handling system for Omics Valid.

Per-line findings in an omics file are never raised: they are collected as
``ValidationError`` values (see ``omics_valid.models.validation``). This module
covers the other class of problems, the setup failures that abort a run before
any line is processed (missing model, unreadable input, broken configuration),
together with their classification and contextual logging.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime


class ErrorCategory(Enum):
    """What part of the setup an error comes from."""
    INPUT = "input"
    MODEL = "model"
    DATA = "data"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    LOW = "low"
    MEDIUM = "medium"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Where an error happened."""
    operation: str
    omics_format: Optional[str] = None
    file_path: Optional[str] = None
    line_number: Optional[int] = None
    timestamp: datetime = field(default_factory=datetime.now)
    additional_data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ErrorInfo:
    """A classified error, ready to be logged."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    exception: Exception
    context: ErrorContext
    recovery_suggestions: List[str] = field(default_factory=list)


RECOVERY_SUGGESTIONS: Dict[ErrorCategory, List[str]] = {
    ErrorCategory.INPUT: [
        "Check that the input file exists and is readable",
        "Verify the file encoding (see INPUT_ENCODING)",
        "Pass the file on stdin if it is produced by another command"
    ],
    ErrorCategory.MODEL: [
        "Check that the model path exists and is readable",
        "Verify the model is valid SBML or a plain identifier list",
        "Make sure python-libsbml is installed for SBML models"
    ],
    ErrorCategory.DATA: [
        "Check the delimiter and number of fields of the line",
        "Verify numeric columns contain numbers"
    ],
    ErrorCategory.CONFIGURATION: [
        "Verify configuration file format and value types",
        "Supply --model when validating metabolomics files",
        "Review environment variable settings"
    ],
}


class OmicsValidError(Exception):
    """Base exception class for Omics Valid errors."""

    category = ErrorCategory.UNKNOWN
    severity = ErrorSeverity.MEDIUM

    def __init__(self, message: str, context: Optional[ErrorContext] = None,
                 original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext(operation="unknown")
        self.original_exception = original_exception


class InputError(OmicsValidError):
    """The omics input file could not be opened or decoded."""

    category = ErrorCategory.INPUT
    severity = ErrorSeverity.CRITICAL


class ModelLoadError(OmicsValidError):
    """The metabolic model file could not be read or parsed."""

    category = ErrorCategory.MODEL
    severity = ErrorSeverity.CRITICAL


class ConfigurationError(OmicsValidError):
    """Errors related to system configuration or invocation."""

    category = ErrorCategory.CONFIGURATION
    severity = ErrorSeverity.CRITICAL


class RecordParseError(OmicsValidError):
    """
    A single input line could not be turned into a record.

    Raised by the record parsers and caught by the validator, which turns it
    into a ``malformed record`` finding for that line only.
    """

    category = ErrorCategory.DATA
    severity = ErrorSeverity.LOW

    def __init__(self, reason: str, context: Optional[ErrorContext] = None):
        super().__init__(reason, context=context)
        self.reason = reason


class ErrorHandler:
    """Logs setup failures once, with their context and recovery hints."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def classify_error(self, error: OmicsValidError, context: Optional[ErrorContext] = None) -> ErrorInfo:
        """
        Describe an error for logging.

        Args:
            error: The error to classify
            context: Context overriding the one carried by the error

        Returns:
            ErrorInfo with category, severity and recovery suggestions
        """
        return ErrorInfo(
            category=error.category,
            severity=error.severity,
            message=error.message,
            exception=error,
            context=context or error.context,
            recovery_suggestions=RECOVERY_SUGGESTIONS.get(error.category, ["Review error details and system logs"])
        )

    def handle_error(self, error: OmicsValidError, context: Optional[ErrorContext] = None) -> ErrorInfo:
        """Classify an error and log it at the level matching its severity."""
        error_info = self.classify_error(error, context)
        self._log_error(error_info)
        return error_info

    def _log_error(self, error_info: ErrorInfo) -> None:
        context = error_info.context
        log_data = {
            "error_category": error_info.category.value,
            "error_severity": error_info.severity.value,
            "operation": context.operation,
            "omics_format": context.omics_format,
            "file_path": context.file_path,
            "line_number": context.line_number,
            "timestamp": context.timestamp.isoformat(),
            "exception_type": type(error_info.exception).__name__,
            "recovery_suggestions": error_info.recovery_suggestions
        }
        original = getattr(error_info.exception, "original_exception", None)
        if original is not None:
            log_data["cause"] = repr(original)
        log_data.update(context.additional_data)

        if error_info.severity == ErrorSeverity.CRITICAL:
            self.logger.critical("Cannot validate: %s", error_info.message, extra=log_data)
        elif error_info.severity == ErrorSeverity.MEDIUM:
            self.logger.warning("Problem during %s: %s", context.operation, error_info.message, extra=log_data)
        else:
            self.logger.info("Minor problem during %s: %s", context.operation, error_info.message, extra=log_data)


# Global error handler instance
_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler


def set_error_handler(handler: Optional[ErrorHandler]) -> None:
    """Set the global error handler instance."""
    global _error_handler
    _error_handler = handler


def handle_error(error: OmicsValidError, context: Optional[ErrorContext] = None) -> ErrorInfo:
    """Handle an error with the global error handler."""
    return get_error_handler().handle_error(error, context)


def create_error_context(
    operation: str,
    omics_format: Optional[str] = None,
    file_path: Optional[str] = None,
    line_number: Optional[int] = None,
    **additional_data
) -> ErrorContext:
    """
    Convenience function to create error context.

    Args:
        operation: Name of the operation being performed
        omics_format: Format selector of the run, if known
        file_path: Path of the file being processed
        line_number: Data line number, if the error concerns one line
        **additional_data: Additional contextual data

    Returns:
        ErrorContext instance
    """
    return ErrorContext(
        operation=operation,
        omics_format=omics_format,
        file_path=file_path,
        line_number=line_number,
        additional_data=additional_data
    )
