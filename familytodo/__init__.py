"""FamilyTodo server package."""

import tomllib
from pathlib import Path

# Calculate version from pyproject.toml
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_PYPROJECT_PATH = _PROJECT_ROOT / "pyproject.toml"


def _get_version() -> str:
    """Get server version from pyproject.toml."""
    if not _PYPROJECT_PATH.exists():
        return "0.0.0"

    with _PYPROJECT_PATH.open("rb") as fp:
        config = tomllib.load(fp)

    return config.get("project", {}).get("version", "0.0.0")


__version__ = _get_version()
