"""Detect View Engine (pre-Ivy) compiler output inside npm package tarballs.

View Engine libraries ship a ``.metadata.json`` file next to each ``.d.ts``
entry point. Ivy-compiled libraries do not, so finding that file beside the
package's declared typings is enough to call a package legacy-compiled.
"""

from __future__ import annotations

import asyncio
import io
import logging
import re
import shutil
import tarfile
import tempfile
from pathlib import Path, PurePosixPath

import httpx

from ngaudit.npm.client import RegistryClient
from ngaudit.npm.metadata import ENTRY_POINT_FIELDS, TYPINGS_FIELDS, PackageMetadata

logger = logging.getLogger("ngaudit.probe")

DECLARATION_EXT = ".d.ts"
MARKER_EXT = ".metadata.json"
_SCRIPT_EXT_RE = re.compile(r"\.(m?js)$")
_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]")

# Errors that mean "this archive could not be inspected"
ARCHIVE_ERRORS = (httpx.HTTPError, tarfile.TarError, OSError, EOFError)


def safe_dir_name(package_name: str) -> str:
    """Turn a package name like ``@scope/pkg`` into a filesystem-safe token."""
    return _UNSAFE_CHARS_RE.sub("_", package_name).strip("_") or "package"


def _normalize(entry: str) -> str:
    return entry[2:] if entry.startswith("./") else entry.lstrip("/")


def resolve_declaration_entry(metadata: PackageMetadata) -> str | None:
    """Find the path of the package's main ``.d.ts`` file, relative to its root."""
    for key in TYPINGS_FIELDS:
        value = metadata.entry_fields.get(key)
        if value:
            return _normalize(value)

    for key in ENTRY_POINT_FIELDS:
        value = metadata.entry_fields.get(key)
        if not value:
            continue
        if _SCRIPT_EXT_RE.search(value):
            return _normalize(_SCRIPT_EXT_RE.sub("", value) + DECLARATION_EXT)
        if not PurePosixPath(value).suffix:
            return _normalize(value + DECLARATION_EXT)
    return None


def legacy_marker_path(entry: str) -> str:
    """Path of the View Engine metadata file that sits beside a ``.d.ts`` entry."""
    if entry.endswith(DECLARATION_EXT):
        return entry[: -len(DECLARATION_EXT)] + MARKER_EXT
    return str(PurePosixPath(entry).with_suffix(MARKER_EXT))


def _package_root(dest: Path) -> Path:
    # npm tarballs normally unpack into a single "package/" directory
    subdirs = [p for p in dest.iterdir() if p.is_dir()]
    if len(subdirs) == 1:
        return subdirs[0]
    return dest


def archive_has_legacy_marker(
    archive: bytes,
    metadata: PackageMetadata,
    work_dir: Path | None = None,
) -> bool:
    """Unpack a tarball into a private temp dir and look for the legacy marker.

    Returns False when no declaration entry point can be resolved. The temp
    directory is always removed before returning. Archive errors propagate.
    """
    entry = resolve_declaration_entry(metadata)
    if entry is None:
        logger.info(f"{metadata.name}: no type declaration entry point found")
        return False
    marker = legacy_marker_path(entry)

    extract_dir = Path(tempfile.mkdtemp(
        prefix=f"ngaudit_{safe_dir_name(metadata.name)}_",
        dir=str(work_dir) if work_dir is not None else None,
    ))
    try:
        with tarfile.open(fileobj=io.BytesIO(archive), mode="r:*") as tar:
            tar.extractall(extract_dir, filter="data")
        found = (_package_root(extract_dir) / marker).is_file()
        logger.debug(f"{metadata.name}: {marker} {'found' if found else 'absent'}")
        return found
    finally:
        shutil.rmtree(extract_dir, ignore_errors=True)


class ArchiveProbe:
    """Decides whether a package was built with the legacy compiler."""

    def __init__(self, client: RegistryClient, work_dir: Path | None = None) -> None:
        self._client = client
        self._work_dir = work_dir

    async def is_legacy_compiled(self, metadata: PackageMetadata) -> bool:
        if metadata.legacy_metadata:
            return True

        if not metadata.tarball_url:
            logger.warning(f"{metadata.name}: registry record has no tarball URL")
            return False

        try:
            archive = await self._client.download_tarball(metadata.tarball_url)
            return await asyncio.to_thread(
                archive_has_legacy_marker, archive, metadata, self._work_dir
            )
        except ARCHIVE_ERRORS as e:
            logger.warning(f"{metadata.name}: archive inspection failed: {e}")
            return False
