"""
Custom exception classes for the EC2 spot price fetcher.

This module defines the exception hierarchy used while acquiring and
analysing spot price history. Errors raised by the AWS SDK itself are
never wrapped: they propagate to the caller unmodified.
"""

from typing import Optional, Dict, Any


class SpotFetchBaseError(Exception):
    """
    Base exception class for all spot fetcher errors.

    Provides common functionality for error handling including
    error codes, details, and structured error responses.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize the base error.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
            original_error: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for structured responses.

        Returns:
            Dictionary representation of the error
        """
        error_dict = {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }

        if self.original_error:
            error_dict["original_error"] = {
                "type": type(self.original_error).__name__,
                "message": str(self.original_error)
            }

        return error_dict


class DataValidationError(SpotFetchBaseError):
    """Raised when data validation fails."""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        validation_rule: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if field_name:
            details["field_name"] = field_name
        if field_value is not None:
            details["field_value"] = str(field_value)
        if validation_rule:
            details["validation_rule"] = validation_rule

        super().__init__(
            message=message,
            error_code="DATA_VALIDATION_ERROR",
            details=details,
            original_error=original_error
        )


class InsufficientDataError(SpotFetchBaseError):
    """Raised when an aggregate is requested over too few samples."""

    def __init__(
        self,
        message: str,
        required_count: Optional[int] = None,
        available_count: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if required_count is not None:
            details["required_count"] = required_count
        if available_count is not None:
            details["available_count"] = available_count

        super().__init__(
            message=message,
            error_code="INSUFFICIENT_DATA_ERROR",
            details=details,
            original_error=original_error
        )


class ConfigurationError(SpotFetchBaseError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        expected_type: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = str(config_value)
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=details,
            original_error=original_error
        )


class OperationCancelledError(SpotFetchBaseError):
    """
    Raised by a blocking operation that gave up because its batch was cancelled.

    The error that triggered the cancellation, if any, is kept as
    ``original_error`` so callers can report the root cause.
    """

    def __init__(
        self,
        message: str = "Operation cancelled",
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            error_code="OPERATION_CANCELLED",
            details=details,
            original_error=original_error
        )


class QueueClosedError(Exception):
    """Raised by ClosableQueue operations once the queue is closed (and drained, for reads)."""
    pass
