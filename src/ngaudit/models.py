"""Data models for a dependency audit run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Classification(StrEnum):
    MAY_NEED_UPGRADE = "may_need_upgrade"
    REVIEW_FOR_REMOVAL = "review_for_removal"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DependencySpec:
    name: str
    declared_range: str


@dataclass
class ClassificationEntry:
    name: str
    declared_range: str
    latest_version: str


@dataclass
class RunState:
    """Buckets and counters for a single audit run.

    Tasks only touch this through :meth:`record`, which never awaits, so
    the append and the counter bump happen as one step on the event loop.
    """

    total: int = 0
    processed: int = 0
    may_need_upgrade: list[ClassificationEntry] = field(default_factory=list)
    review_for_removal: list[ClassificationEntry] = field(default_factory=list)
    unknown: list[str] = field(default_factory=list)

    def record(
        self,
        spec: DependencySpec,
        outcome: Classification | None,
        latest_version: str | None = None,
    ) -> int:
        """Count one finished dependency and file it. Returns the new count.

        ``outcome=None`` means the dependency was deliberately skipped and
        lands in no bucket.
        """
        self.processed += 1
        if outcome is Classification.UNKNOWN:
            self.unknown.append(spec.name)
        elif outcome is not None:
            entry = ClassificationEntry(
                name=spec.name,
                declared_range=spec.declared_range,
                latest_version=latest_version or "",
            )
            if outcome is Classification.REVIEW_FOR_REMOVAL:
                self.review_for_removal.append(entry)
            else:
                self.may_need_upgrade.append(entry)
        return self.processed

    @property
    def bucket_count(self) -> int:
        return (
            len(self.may_need_upgrade)
            + len(self.review_for_removal)
            + len(self.unknown)
        )
