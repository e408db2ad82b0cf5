# Custom exception hierarchy for the production scheduling engine.
# Version: 1.0.0
# Provides structured error handling with field-level context and user-friendly messages.

from typing import Any


class SchedulingError(Exception):
    """Base exception for all scheduling engine errors.

    All custom exceptions inherit from this class to allow catching
    any scheduling-related error with a single except clause.

    Attributes:
        message: Human-readable error description.
        details: Additional context for debugging.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize the scheduling error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary of additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error message with details."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message


class ValidationError(SchedulingError):
    """Raised when job or work center input fails validation.

    Used for malformed due dates, non-positive operation hours, out-of-range
    priority levels and inconsistent work center capacity figures.

    Attributes:
        field: Name of the field that failed validation.
        value: The invalid value that was provided.
        reason: Explanation of why the value is invalid.
        row: Optional row number in a tabular data source.
    """

    def __init__(
        self,
        field: str,
        value: Any,
        reason: str,
        row: int | None = None
    ) -> None:
        """Initialize the validation error.

        Args:
            field: Name of the field that failed validation.
            value: The invalid value provided.
            reason: Explanation of why validation failed.
            row: Optional row number (1-indexed) for spreadsheet errors.
        """
        self.field = field
        self.value = value
        self.reason = reason
        self.row = row

        details = {"field": field, "value": repr(value)}
        if row is not None:
            details["row"] = row

        location = f" in row {row}" if row else ""
        message = f"Invalid {field}{location}: {reason}. Got: {repr(value)}"
        super().__init__(message, details)


class ConfigurationError(SchedulingError):
    """Raised when scheduling configuration is invalid.

    Attributes:
        config_source: Name of the configuration source (file, section, etc.).
        issue: Description of the configuration problem.
    """

    def __init__(self, config_source: str, issue: str) -> None:
        self.config_source = config_source
        self.issue = issue

        message = f"Configuration error in {config_source}: {issue}"
        super().__init__(message, {"source": config_source})


class FileLoadError(SchedulingError):
    """Raised when a required file cannot be loaded.

    Covers file not found, permission denied, corrupted files, and
    unexpected file format issues.

    Attributes:
        filepath: Path to the file that failed to load.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, filepath: str, cause: Exception) -> None:
        """Initialize the file load error.

        Args:
            filepath: Path to the file that failed to load.
            cause: The underlying exception.
        """
        self.filepath = filepath
        self.cause = cause

        # Extract just the filename for cleaner messages
        filename = filepath.split("/")[-1].split("\\")[-1]
        cause_type = type(cause).__name__

        message = f"Failed to load {filename}: {cause_type} - {cause}"
        super().__init__(message, {"filepath": filepath, "cause_type": cause_type})


class UnplaceableOperationError(SchedulingError):
    """Raised when no work center can accept an operation.

    The whole scheduling request fails: a job is never partially scheduled.
    Callers should report "no available work center" to the user rather
    than retry automatically.

    Attributes:
        operation_name: Display name of the operation that could not be placed.
        operation_id: Identifier of the operation (may be a temp id).
        reason: Explanation of why no work center qualified.
    """

    def __init__(
        self,
        operation_name: str,
        operation_id: str,
        reason: str = "no work center has capacity and an open time slot"
    ) -> None:
        """Initialize the unplaceable operation error.

        Args:
            operation_name: Display name of the failing operation.
            operation_id: Identifier of the failing operation.
            reason: Explanation of why placement failed.
        """
        self.operation_name = operation_name
        self.operation_id = operation_id
        self.reason = reason

        message = f"No available work center found for operation: {operation_name} ({reason})"
        super().__init__(message, {"operation_id": operation_id})


class CapacityProviderError(SchedulingError):
    """Raised when work center capacity cannot be fetched.

    Treated as a hard failure of the whole scheduling call; no cached or
    partial capacity is substituted.

    Attributes:
        provider: Name of the provider that failed.
        cause: The underlying exception.
    """

    def __init__(self, provider: str, cause: Exception) -> None:
        self.provider = provider
        self.cause = cause

        cause_type = type(cause).__name__
        message = f"Capacity provider {provider} failed: {cause_type} - {cause}"
        super().__init__(message, {"provider": provider, "cause_type": cause_type})
