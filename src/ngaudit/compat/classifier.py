"""Per-dependency compatibility decision."""

from __future__ import annotations

import logging
import re
from typing import Protocol

from packaging.version import InvalidVersion, Version

from ngaudit.models import Classification, DependencySpec
from ngaudit.npm.metadata import PackageMetadata

logger = logging.getLogger("ngaudit.classifier")

_RANGE_PREFIX_RE = re.compile(r"^[\s^~=v<>]+")


class LegacyProbe(Protocol):
    async def is_legacy_compiled(self, metadata: PackageMetadata) -> bool: ...


def strip_range(declared: str) -> str:
    """Reduce a simple npm range like ``^15.2.0`` or ``~1.0`` to its version."""
    return _RANGE_PREFIX_RE.sub("", declared.strip())


def versions_differ(declared: str, latest: str) -> bool:
    """Compare a declared range against a concrete version.

    Uses PEP 440 ordering where both sides parse (npm pre-release tags like
    ``-rc.1`` normalize fine), plain string comparison otherwise.
    """
    current = strip_range(declared)
    try:
        return Version(current) != Version(latest)
    except InvalidVersion:
        return current != latest


async def classify(
    spec: DependencySpec,
    metadata: PackageMetadata | None,
    probe: LegacyProbe,
    *,
    framework_scope: str = "@angular/",
    framework_peer: str = "@angular/core",
    enforce_boundary: bool = False,
) -> Classification | None:
    """Classify one dependency.

    Returns None for first-party framework packages that are already on
    their latest version; those are left out of every bucket.
    """
    if metadata is None:
        return Classification.UNKNOWN

    # First-party framework packages never get probed, only version-checked
    if spec.name.startswith(framework_scope):
        if versions_differ(spec.declared_range, metadata.latest_version):
            return Classification.MAY_NEED_UPGRADE
        logger.debug(f"{spec.name} is on the latest version, skipping")
        return None

    if framework_peer not in metadata.all_dependencies:
        return Classification.UNKNOWN

    if enforce_boundary and framework_peer not in metadata.peer_dependencies:
        logger.info(
            f"{spec.name} declares {framework_peer} outside peerDependencies"
        )
        return Classification.UNKNOWN

    if await probe.is_legacy_compiled(metadata):
        return Classification.REVIEW_FOR_REMOVAL
    return Classification.MAY_NEED_UPGRADE
