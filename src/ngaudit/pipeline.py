"""Audit orchestrator — fans classification out over every declared dependency."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

from ngaudit.compat.classifier import LegacyProbe, classify
from ngaudit.compat.probe import ArchiveProbe
from ngaudit.config import AuditConfig
from ngaudit.models import Classification, DependencySpec, RunState
from ngaudit.npm.client import FetchFailed, RegistryClient
from ngaudit.npm.metadata import PackageMetadata

logger = logging.getLogger("ngaudit.pipeline")

ProgressCallback = Callable[[int, int], None]


class Auditor:
    """Runs the registry lookup, probe and classification for a dependency set."""

    def __init__(
        self,
        config: AuditConfig,
        client: RegistryClient | None = None,
        probe: LegacyProbe | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.config = config
        config.ensure_dirs()
        self.client = client or RegistryClient(
            base_url=config.registry_url,
            max_retries=config.max_retries,
            retry_base_delay=config.retry_base_delay,
            timeout=config.http_timeout,
        )
        self.probe = probe or ArchiveProbe(self.client, work_dir=config.work_dir)
        self.on_progress = on_progress

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> Auditor:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    def select(self, specs: Iterable[DependencySpec]) -> list[DependencySpec]:
        """Drop first-party framework packages when asked to skip them."""
        if not self.config.skip_framework:
            return list(specs)
        return [s for s in specs if not s.name.startswith(self.config.framework_scope)]

    async def run(self, specs: Iterable[DependencySpec]) -> RunState:
        """Classify every dependency concurrently and return the filled buckets."""
        selected = self.select(specs)
        state = RunState(total=len(selected))
        logger.info(f"Checking {state.total} dependencies")

        await asyncio.gather(*(self._check_one(spec, state) for spec in selected))

        logger.info(
            f"Audit complete: {len(state.may_need_upgrade)} may need upgrade, "
            f"{len(state.review_for_removal)} to review, "
            f"{len(state.unknown)} unknown"
        )
        return state

    async def _check_one(self, spec: DependencySpec, state: RunState) -> None:
        metadata: PackageMetadata | None = None
        try:
            try:
                metadata = await self.client.fetch_latest(spec.name)
            except FetchFailed as e:
                logger.warning(f"{e}; marking as unknown")

            outcome = await classify(
                spec,
                metadata,
                self.probe,
                framework_scope=self.config.framework_scope,
                framework_peer=self.config.framework_peer,
                enforce_boundary=self.config.enforce_boundary,
            )
        except Exception:
            logger.exception(f"Unexpected error while checking {spec.name}")
            outcome = Classification.UNKNOWN

        latest = metadata.latest_version if metadata is not None else None
        processed = state.record(spec, outcome, latest)
        self._tick(processed, state.total)

    def _tick(self, processed: int, total: int) -> None:
        if processed % self.config.progress_every != 0 and processed != total:
            return
        logger.info(f"Processed {processed}/{total}")
        if self.on_progress is not None:
            self.on_progress(processed, total)
