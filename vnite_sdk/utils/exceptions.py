from __future__ import annotations

from typing import Any, Dict, List, Optional


class VniteError(Exception):
    """Base exception for all Vnite SDK errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize exception.

        Args:
            message: Error message
            details: Additional error information
        """
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return f"{self.message}"


class ConfigurationError(VniteError):
    """Exception raised for configuration-related errors."""

    def __init__(
            self, message: str, config_key: Optional[str] = None, **kwargs: Any
    ) -> None:
        """Initialize a ConfigurationError.

        Args:
            message: A descriptive error message.
            config_key: The configuration key that caused the error.
            **kwargs: Additional keyword arguments to pass to the parent Exception.
        """
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details=details, **kwargs)
        self.config_key = config_key


class ManagerError(VniteError):
    """Base exception for manager-related errors."""

    def __init__(self, message: str, manager_name: Optional[str] = None, **kwargs: Any) -> None:
        """
        Initialize manager error.

        Args:
            message: Error message
            manager_name: Name of the affected manager
            **kwargs: Additional error information
        """
        details = kwargs.pop("details", {})
        if manager_name:
            details["manager_name"] = manager_name
        super().__init__(message, details=details, **kwargs)
        self.manager_name = manager_name

    def __str__(self) -> str:
        """String representation."""
        if self.manager_name:
            return f"{self.message} (Manager: {self.manager_name})"
        return super().__str__()


class ManagerInitializationError(ManagerError):
    """Exception raised when a manager fails to initialize."""

    pass


class PackagingError(VniteError):
    """Base exception for errors raised by the packaging pipeline."""

    def __init__(self, message: str, stage: Optional[str] = None, **kwargs: Any) -> None:
        """Initialize a PackagingError.

        Args:
            message: A descriptive error message.
            stage: Pipeline stage that failed (manifest, entry, archive, ...).
            **kwargs: Additional keyword arguments to pass to the parent Exception.
        """
        details = kwargs.pop("details", {})
        if stage:
            details["stage"] = stage
        super().__init__(message, details=details, **kwargs)
        self.stage = stage


class ManifestError(PackagingError):
    """Exception raised when the plugin descriptor is missing or unreadable."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("stage", "manifest")
        super().__init__(message, **kwargs)


class ManifestValidationError(ManifestError):
    """Exception raised when required descriptor fields are missing or invalid.

    Every offending field is collected, not only the first one found.
    """

    def __init__(
            self,
            message: str,
            missing_fields: Optional[List[str]] = None,
            invalid_fields: Optional[Dict[str, str]] = None,
            **kwargs: Any
    ) -> None:
        """Initialize a ManifestValidationError.

        Args:
            message: A descriptive error message.
            missing_fields: Required fields absent from the descriptor.
            invalid_fields: Required fields present but unusable, mapped to the reason.
            **kwargs: Additional keyword arguments to pass to the parent Exception.
        """
        self.missing_fields: List[str] = list(missing_fields or [])
        self.invalid_fields: Dict[str, str] = dict(invalid_fields or {})
        details = kwargs.pop("details", {})
        details["missing_fields"] = self.missing_fields
        details["invalid_fields"] = self.invalid_fields
        super().__init__(message, details=details, **kwargs)


class EntryFileNotFoundError(PackagingError):
    """Exception raised when the file named by ``main`` does not exist."""

    def __init__(self, message: str, entry_file: Optional[str] = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if entry_file:
            details["entry_file"] = entry_file
        kwargs.setdefault("stage", "entry")
        super().__init__(message, details=details, **kwargs)
        self.entry_file = entry_file


class ArchiveError(PackagingError):
    """Exception raised when the archive cannot be written."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("stage", "archive")
        super().__init__(message, **kwargs)
