"""Read the project version from pyproject.toml.

Used by ``--package`` to name the newest release after the version the
project is about to publish.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from auto_changelog.exceptions import ConfigNotFoundError, ConfigValidationError

if TYPE_CHECKING:
    from pathlib import Path


def get_pyproject_version(path: Path) -> str:
    """Get the version from pyproject.toml.

    Args:
        path: Path to pyproject.toml

    Returns:
        Version string

    Raises:
        ConfigNotFoundError: If the file doesn't exist
        ConfigValidationError: If no static version can be found
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"File {path} does not exist")

    content = path.read_text(encoding="utf-8")

    # Try PEP 621 format first: [project] version = "..."
    pep621_match = re.search(
        r'^\[project\].*?^version\s*=\s*["\']([^"\']+)["\']',
        content,
        re.MULTILINE | re.DOTALL,
    )
    if pep621_match:
        return pep621_match.group(1)

    # Try Poetry format: [tool.poetry] version = "..."
    poetry_match = re.search(
        r'^\[tool\.poetry\].*?^version\s*=\s*["\']([^"\']+)["\']',
        content,
        re.MULTILINE | re.DOTALL,
    )
    if poetry_match:
        return poetry_match.group(1)

    raise ConfigValidationError(
        f"Could not find version in {path}. "
        "Expected [project].version or [tool.poetry].version."
    )
