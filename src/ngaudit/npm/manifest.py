"""Read declared dependencies from a project's package.json."""

from __future__ import annotations

import json
from pathlib import Path

from ngaudit.models import DependencySpec


class ManifestError(Exception):
    """Raised when package.json is missing or unusable."""


def load_dependencies(path: Path) -> list[DependencySpec]:
    """Return the ``dependencies`` of a package.json in file order."""
    if not path.is_file():
        raise ManifestError(f"No package.json found at {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ManifestError(f"Could not read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"{path} does not contain a JSON object")

    deps = data.get("dependencies") or {}
    if not isinstance(deps, dict):
        raise ManifestError(f"'dependencies' in {path} must be an object")

    return [DependencySpec(name, str(declared)) for name, declared in deps.items()]
