"""Package metadata dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Fields that can point at a package's type declarations, in lookup order.
TYPINGS_FIELDS = ("typings", "types")
ENTRY_POINT_FIELDS = (
    "fesm2015",
    "fesm5",
    "esm2015",
    "es2015",
    "esm5",
    "main",
    "module",
    "browser",
)


@dataclass
class PackageMetadata:
    name: str
    latest_version: str
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    peer_dependencies: dict[str, str] = field(default_factory=dict)
    tarball_url: str | None = None
    entry_fields: dict[str, str | None] = field(default_factory=dict)
    legacy_metadata: bool = False

    @property
    def all_dependencies(self) -> dict[str, str]:
        return {
            **self.dependencies,
            **self.dev_dependencies,
            **self.peer_dependencies,
        }

    @classmethod
    def from_registry(cls, data: dict[str, Any]) -> PackageMetadata:
        """Build metadata from a registry ``/<name>/latest`` document."""
        entry_fields: dict[str, str | None] = {}
        for key in TYPINGS_FIELDS + ENTRY_POINT_FIELDS:
            value = data.get(key)
            # "browser" may be an object of replacements; only paths count
            entry_fields[key] = value if isinstance(value, str) else None

        metadata_field = data.get("metadata")
        legacy = "__processed_by_ivy_ngcc__" in data or (
            isinstance(metadata_field, str)
            and metadata_field.endswith(".metadata.json")
        )

        return cls(
            name=data.get("name", ""),
            latest_version=data.get("version", ""),
            dependencies=dict(data.get("dependencies") or {}),
            dev_dependencies=dict(data.get("devDependencies") or {}),
            peer_dependencies=dict(data.get("peerDependencies") or {}),
            tarball_url=(data.get("dist") or {}).get("tarball"),
            entry_fields=entry_fields,
            legacy_metadata=legacy,
        )
