"""Global configuration for ngaudit."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class AuditConfig:
    registry_url: str = "https://registry.npmjs.org"

    # Registry retries
    max_retries: int = 3
    retry_base_delay: float = 1.0
    http_timeout: float = 30.0

    # Archive extraction happens under here (system temp dir when None)
    work_dir: Path | None = None

    # Logging
    log_level: str = "WARNING"
    log_file: Path | None = None

    # Classification
    framework_scope: str = "@angular/"
    framework_peer: str = "@angular/core"
    enforce_boundary: bool = False
    skip_framework: bool = False
    progress_every: int = 5

    def ensure_dirs(self) -> None:
        """Create the work directory if one is configured."""
        if self.work_dir is not None:
            self.work_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_env(cls) -> AuditConfig:
        """Load config from environment variables."""
        config = cls()
        if url := os.environ.get("NGAUDIT_REGISTRY_URL"):
            config.registry_url = url.rstrip("/")
        if retries := os.environ.get("NGAUDIT_MAX_RETRIES"):
            config.max_retries = int(retries)
            if config.max_retries < 1:
                raise ValueError(f"NGAUDIT_MAX_RETRIES must be >= 1, got {retries}")
        if delay := os.environ.get("NGAUDIT_RETRY_DELAY"):
            config.retry_base_delay = float(delay)
        if timeout := os.environ.get("NGAUDIT_HTTP_TIMEOUT"):
            config.http_timeout = float(timeout)
        if work_dir := os.environ.get("NGAUDIT_WORK_DIR"):
            config.work_dir = Path(work_dir)
        if level := os.environ.get("NGAUDIT_LOG_LEVEL"):
            config.log_level = level.upper()
        if log_file := os.environ.get("NGAUDIT_LOG_FILE"):
            config.log_file = Path(log_file)
        return config
