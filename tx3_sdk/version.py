"""
Version information for the tx3 SDK.

The installed distribution metadata wins. A source checkout without an
install falls back to the ``[project]`` table of ``pyproject.toml``.
"""
import importlib.metadata
import pathlib
from typing import Optional

import tomli

DISTRIBUTION = "tx3-sdk"
DEFAULT_VERSION = "0.1.0"
PYPROJECT = pathlib.Path(__file__).resolve().parent.parent / "pyproject.toml"


def _version_from_pyproject(path: pathlib.Path) -> Optional[str]:
    try:
        with path.open("rb") as f:
            return tomli.load(f)["project"]["version"]
    except (OSError, KeyError, TypeError, tomli.TOMLDecodeError):
        return None


def get_version() -> str:
    """Version of the SDK, ``DEFAULT_VERSION`` when no source of truth is found."""
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        return _version_from_pyproject(PYPROJECT) or DEFAULT_VERSION


__version__ = get_version()
