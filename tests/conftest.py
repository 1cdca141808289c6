"""Pytest configuration and fixtures for the Vnite plugin SDK tests."""

from __future__ import annotations

import datetime
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

FIXED_TIME = datetime.datetime(2024, 5, 1, 12, 30, 0, 123000, tzinfo=datetime.timezone.utc)


@pytest.fixture(autouse=True)
def clean_sdk_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep VNITE_SDK_ overrides from the developer's shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("VNITE_SDK_"):
            monkeypatch.delenv(name)


@pytest.fixture
def write_manifest() -> Callable[..., Path]:
    """Return a helper writing a package.json into a project directory."""

    def _write(project_dir: Path, data: Any) -> Path:
        path = project_dir / "package.json"
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def manifest_data() -> Dict[str, Any]:
    """A valid descriptor with a couple of pass-through fields."""
    return {
        "id": "demo",
        "name": "Demo Plugin",
        "version": "1.2.0",
        "main": "dist/index.js",
        "description": "A plugin used in tests",
        "keywords": ["demo", "test"],
    }


@pytest.fixture
def plugin_project(tmp_path: Path, write_manifest: Callable[..., Path], manifest_data: Dict[str, Any]) -> Path:
    """Create a complete plugin project on disk.

    Layout::

        package.json
        README.md
        icon.png
        dist/index.js
        dist/index.js.map
        dist/index.d.ts
        dist/chunks/extra.js
        assets/logo.svg
        assets/locales/en.json
    """
    project = tmp_path / "demo-plugin"
    (project / "dist" / "chunks").mkdir(parents=True)
    (project / "assets" / "locales").mkdir(parents=True)

    write_manifest(project, manifest_data)
    (project / "README.md").write_text("# Demo\n", encoding="utf-8")
    (project / "icon.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (project / "dist" / "index.js").write_text("module.exports = {}\n", encoding="utf-8")
    (project / "dist" / "index.js.map").write_text("{}\n", encoding="utf-8")
    (project / "dist" / "index.d.ts").write_text("export {}\n", encoding="utf-8")
    (project / "dist" / "chunks" / "extra.js").write_text("// nested\n", encoding="utf-8")
    (project / "assets" / "logo.svg").write_text("<svg/>\n", encoding="utf-8")
    (project / "assets" / "locales" / "en.json").write_text('{"hello": "Hello"}\n', encoding="utf-8")
    return project


@pytest.fixture
def report_lines() -> List[str]:
    """Collects the progress lines a packager reports."""
    return []


@pytest.fixture
def fixed_clock() -> Callable[[], datetime.datetime]:
    return lambda: FIXED_TIME
