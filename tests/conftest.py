"""Shared test fixtures."""

from __future__ import annotations

import io
import logging
import tarfile
from pathlib import Path
from typing import Any

import pytest

from ngaudit.config import AuditConfig


def make_tarball(files: dict[str, str], root: str = "package") -> bytes:
    """Build an in-memory .tgz laid out like an npm tarball."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{root}/{name}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def registry_doc(name: str, version: str = "1.0.0", **fields: Any) -> dict[str, Any]:
    """A minimal ``/<name>/latest`` registry document."""
    doc: dict[str, Any] = {
        "name": name,
        "version": version,
        "dependencies": {},
        "dist": {"tarball": f"https://registry.example/{name}/-/{name}-{version}.tgz"},
    }
    doc.update(fields)
    return doc


@pytest.fixture
def config(tmp_path: Path) -> AuditConfig:
    return AuditConfig(work_dir=tmp_path / "work", retry_base_delay=0.0)


@pytest.fixture
def tarball():
    """Helper to build npm-style tarballs."""
    return make_tarball


@pytest.fixture
def doc():
    """Helper to build registry documents."""
    return registry_doc


@pytest.fixture(autouse=True)
def reset_ngaudit_logger():
    """Undo handlers installed by the CLI's logging setup."""
    yield
    logger = logging.getLogger("ngaudit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
