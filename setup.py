"""Setup script for the Vnite plugin SDK.

This script installs the SDK's packaging tools and their dependencies.
"""

from __future__ import annotations

import setuptools

# Read the long description from README.md
with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

# Read version from __version__.py
version = {}
with open("vnite_sdk/__version__.py", "r", encoding="utf-8") as f:
    exec(f.read(), version)

# Dependencies
install_requires = [
    "pydantic>=2.0.0",
    "pyyaml>=6.0",
    "structlog>=22.1.0",
    "python-json-logger>=2.0.4",
]

# Development dependencies
dev_requires = [
    "pytest>=7.0.0",
    "pytest-cov>=4.0.0",
    "black>=23.1.0",
    "isort>=5.12.0",
    "mypy>=1.0.0",
    "types-pyyaml",
]

setuptools.setup(
    name="vnite-plugin-sdk",
    version=version.get("__version__", "1.0.0"),
    author="Vnite Team",
    description="Packaging tools for Vnite plugins",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/ximu3/vnite-plugin-sdk",
    packages=setuptools.find_packages(include=["vnite_sdk", "vnite_sdk.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
    install_requires=install_requires,
    extras_require={
        "dev": dev_requires,
        "test": ["pytest>=7.0.0", "pytest-cov>=4.0.0"],
        "all": dev_requires,
    },
    entry_points={
        "console_scripts": [
            "vnite-plugin-sdk=vnite_sdk.main:main",
            "vnite-plugin-pack=vnite_sdk.plugin_system.cli:main",
        ],
    },
)
