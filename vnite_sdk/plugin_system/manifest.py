from __future__ import annotations

import datetime
import json
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import pydantic
from pydantic import ConfigDict, Field, PrivateAttr, model_validator

from vnite_sdk.utils.exceptions import ManifestError, ManifestValidationError

REQUIRED_FIELDS = ('id', 'name', 'version', 'main')


class PluginManifest(pydantic.BaseModel):
    """Plugin descriptor as read from a project's ``package.json``.

    Only the fields the packager relies on are declared; every other key is
    kept as an extra and passes through to the final manifest untouched.
    """

    model_config = ConfigDict(extra='allow', frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    main: str = Field(min_length=1)

    _key_order: Tuple[str, ...] = PrivateAttr(default=())

    @model_validator(mode='wrap')
    @classmethod
    def remember_key_order(cls, data: Any, handler: Any) -> PluginManifest:
        manifest = handler(data)
        if isinstance(data, dict):
            manifest._key_order = tuple(data)
        return manifest

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = 'package.json') -> PluginManifest:
        """Validate a parsed descriptor.

        Args:
            data: Parsed descriptor contents
            source: Descriptor name used in error messages

        Returns:
            The validated manifest

        Raises:
            ManifestValidationError: Listing every missing or invalid required field
        """
        if not isinstance(data, dict):
            raise ManifestError(f'Invalid {source}: expected a JSON object at the top level')

        try:
            return cls.model_validate(data)
        except pydantic.ValidationError as e:
            missing: List[str] = []
            invalid: Dict[str, str] = {}
            for error in e.errors():
                field = str(error['loc'][0]) if error['loc'] else ''
                if field not in REQUIRED_FIELDS:
                    continue
                # An empty string counts as missing, like an absent key
                if error['type'] in ('missing', 'string_too_short'):
                    if field not in missing:
                        missing.append(field)
                else:
                    invalid[field] = error['msg']

            ordered_missing = [f for f in REQUIRED_FIELDS if f in missing]
            problems = []
            if ordered_missing:
                problems.append(f"missing required fields ({', '.join(ordered_missing)})")
            if invalid:
                problems.append(
                    'invalid required fields ('
                    + ', '.join(f'{name}: {reason}' for name, reason in invalid.items())
                    + ')'
                )
            raise ManifestValidationError(
                f"Invalid {source}: {'; '.join(problems)}",
                missing_fields=ordered_missing,
                invalid_fields=invalid,
            ) from e

    @classmethod
    def load(cls, path: Union[str, Path]) -> PluginManifest:
        """Read and validate a descriptor file.

        Raises:
            ManifestError: If the file is absent or not valid JSON
            ManifestValidationError: If required fields are missing or invalid
        """
        path = Path(path)
        if not path.is_file():
            raise ManifestError(f'{path.name} not found in {path.parent}')
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ManifestError(f'Invalid {path.name}: {e}') from e
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestError(f'Failed to read {path.name}: {e}') from e
        return cls.from_dict(data, source=path.name)

    def to_dict(self) -> Dict[str, Any]:
        """Return the descriptor exactly as it was provided, in its original key order."""
        data = self.model_dump(exclude_unset=True)
        ordered = {key: data[key] for key in self._key_order if key in data}
        ordered.update(data)
        return ordered

    def to_final_manifest(self, packaged_at: datetime.datetime, sdk_version: str) -> Dict[str, Any]:
        """Build the manifest written into the archive.

        Args:
            packaged_at: Archive creation time
            sdk_version: Version of the SDK performing the packaging

        Returns:
            The descriptor fields plus ``packagedAt`` and ``sdkVersion``
        """
        data = self.to_dict()
        data['packagedAt'] = format_timestamp(packaged_at)
        data['sdkVersion'] = sdk_version
        return data


def format_timestamp(value: datetime.datetime) -> str:
    """Format a timestamp as ISO-8601 UTC with millisecond precision.

    ``2024-05-01T12:30:00.123Z``; naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    value = value.astimezone(datetime.timezone.utc)
    return value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')
