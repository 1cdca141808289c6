"""Unit tests for the SDK exception hierarchy."""

from __future__ import annotations

import pytest

from vnite_sdk.utils.exceptions import (
    ArchiveError,
    ConfigurationError,
    EntryFileNotFoundError,
    ManagerError,
    ManagerInitializationError,
    ManifestError,
    ManifestValidationError,
    PackagingError,
    VniteError,
)


def test_base_error_keeps_message_and_details() -> None:
    error = VniteError("Something broke", details={"path": "dist"})

    assert str(error) == "Something broke"
    assert error.message == "Something broke"
    assert error.details == {"path": "dist"}


def test_configuration_error_records_key() -> None:
    error = ConfigurationError("Bad value", config_key="packaging.extension")

    assert error.config_key == "packaging.extension"
    assert error.details["config_key"] == "packaging.extension"


def test_manager_error_str_names_manager() -> None:
    assert str(ManagerInitializationError("Failed", manager_name="config_manager")) == (
        "Failed (Manager: config_manager)"
    )
    assert str(ManagerError("Failed")) == "Failed"


@pytest.mark.parametrize(
    "error, stage",
    [
        (ManifestError("package.json not found in /tmp"), "manifest"),
        (ManifestValidationError("Invalid package.json", missing_fields=["id"]), "manifest"),
        (EntryFileNotFoundError("Main file not found: index.js", entry_file="index.js"), "entry"),
        (ArchiveError("Failed to create package: disk full"), "archive"),
    ],
)
def test_packaging_errors_record_stage(error: PackagingError, stage: str) -> None:
    """Test that each packaging failure names the stage that failed."""
    assert isinstance(error, PackagingError)
    assert isinstance(error, VniteError)
    assert error.stage == stage
    assert error.details["stage"] == stage


def test_manifest_validation_error_fields() -> None:
    error = ManifestValidationError(
        "Invalid package.json",
        missing_fields=["version", "main"],
        invalid_fields={"id": "Input should be a valid string"},
    )

    assert isinstance(error, ManifestError)
    assert error.missing_fields == ["version", "main"]
    assert error.details["invalid_fields"] == {"id": "Input should be a valid string"}


def test_entry_file_error_records_path() -> None:
    error = EntryFileNotFoundError("Main file not found: dist/index.js", entry_file="dist/index.js")

    assert error.entry_file == "dist/index.js"
    assert str(error) == "Main file not found: dist/index.js"
