"""Tests for the per-dependency compatibility decision."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from ngaudit.compat.classifier import classify, strip_range, versions_differ
from ngaudit.models import Classification, DependencySpec
from ngaudit.npm.metadata import PackageMetadata


def fake_probe(legacy: bool = False) -> MagicMock:
    probe = MagicMock()
    probe.is_legacy_compiled = AsyncMock(return_value=legacy)
    return probe


def meta(
    name: str,
    version: str = "2.0.0",
    *,
    deps: dict | None = None,
    peers: dict | None = None,
    dev: dict | None = None,
) -> PackageMetadata:
    return PackageMetadata(
        name=name,
        latest_version=version,
        dependencies=deps or {},
        dev_dependencies=dev or {},
        peer_dependencies=peers or {},
    )


class TestVersionHelpers:
    def test_strip_range(self) -> None:
        assert strip_range("^15.2.0") == "15.2.0"
        assert strip_range("~1.0.3") == "1.0.3"
        assert strip_range(">=2.0.0") == "2.0.0"
        assert strip_range("3.0.0") == "3.0.0"

    def test_versions_differ(self) -> None:
        assert versions_differ("^15.2.0", "17.0.1") is True
        assert versions_differ("~17.0.1", "17.0.1") is False
        assert versions_differ("17.0", "17.0.0") is False

    def test_prerelease_versions(self) -> None:
        assert versions_differ("17.0.0-rc.1", "17.0.0") is True
        assert versions_differ("17.0.0-rc.1", "17.0.0-rc.1") is False

    def test_unparsable_falls_back_to_strings(self) -> None:
        assert versions_differ("latest", "17.0.0") is True
        assert versions_differ("github:org/repo", "github:org/repo") is False


class TestClassify:
    @pytest.mark.asyncio
    async def test_absent_metadata_is_unknown(self) -> None:
        probe = fake_probe()
        result = await classify(DependencySpec("gone", "1.0.0"), None, probe)
        assert result is Classification.UNKNOWN
        probe.is_legacy_compiled.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_framework_peer_is_unknown(self) -> None:
        probe = fake_probe(legacy=True)
        result = await classify(
            DependencySpec("left-pad", "1.0.0"), meta("left-pad", "1.3.0"), probe
        )
        assert result is Classification.UNKNOWN
        probe.is_legacy_compiled.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_legacy_package_to_review(self) -> None:
        result = await classify(
            DependencySpec("ng2-old", "1.0.0"),
            meta("ng2-old", peers={"@angular/core": "^8.0.0"}),
            fake_probe(legacy=True),
        )
        assert result is Classification.REVIEW_FOR_REMOVAL

    @pytest.mark.asyncio
    async def test_ivy_package_may_need_upgrade(self) -> None:
        result = await classify(
            DependencySpec("ngx-new", "1.0.0"),
            meta("ngx-new", deps={"@angular/core": "^16.0.0"}),
            fake_probe(legacy=False),
        )
        assert result is Classification.MAY_NEED_UPGRADE

    @pytest.mark.asyncio
    async def test_dev_dependency_counts_as_peer_signal(self) -> None:
        result = await classify(
            DependencySpec("ngx-dev", "1.0.0"),
            meta("ngx-dev", dev={"@angular/core": "^16.0.0"}),
            fake_probe(legacy=False),
        )
        assert result is Classification.MAY_NEED_UPGRADE

    @pytest.mark.asyncio
    async def test_boundary_rejects_non_peer_declaration(self) -> None:
        probe = fake_probe(legacy=True)
        result = await classify(
            DependencySpec("ng2-old", "1.0.0"),
            meta("ng2-old", deps={"@angular/core": "^8.0.0"}),
            probe,
            enforce_boundary=True,
        )
        assert result is Classification.UNKNOWN
        probe.is_legacy_compiled.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_boundary_rejects_missing_peer(self) -> None:
        result = await classify(
            DependencySpec("lodash", "4.0.0"),
            meta("lodash"),
            fake_probe(legacy=True),
            enforce_boundary=True,
        )
        assert result is Classification.UNKNOWN

    @pytest.mark.asyncio
    async def test_boundary_accepts_peer_declaration(self) -> None:
        result = await classify(
            DependencySpec("ng2-old", "1.0.0"),
            meta("ng2-old", peers={"@angular/core": "^8.0.0"}),
            fake_probe(legacy=True),
            enforce_boundary=True,
        )
        assert result is Classification.REVIEW_FOR_REMOVAL

    @pytest.mark.asyncio
    async def test_framework_package_behind_latest(self) -> None:
        probe = fake_probe(legacy=True)
        result = await classify(
            DependencySpec("@angular/core", "^15.2.0"),
            meta("@angular/core", "17.0.1"),
            probe,
        )
        assert result is Classification.MAY_NEED_UPGRADE
        probe.is_legacy_compiled.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_framework_package_up_to_date_is_skipped(self) -> None:
        result = await classify(
            DependencySpec("@angular/router", "^17.0.1"),
            meta("@angular/router", "17.0.1"),
            fake_probe(),
        )
        assert result is None

    @pytest.mark.asyncio
    async def test_custom_framework_names(self) -> None:
        result = await classify(
            DependencySpec("vue-widget", "1.0.0"),
            meta("vue-widget", peers={"vue": "^3.0.0"}),
            fake_probe(legacy=False),
            framework_scope="@vue/",
            framework_peer="vue",
        )
        assert result is Classification.MAY_NEED_UPGRADE

    @pytest.mark.asyncio
    async def test_repeated_calls_agree(self) -> None:
        spec = DependencySpec("ng2-old", "1.0.0")
        m = meta("ng2-old", peers={"@angular/core": "^8.0.0"})
        probe = fake_probe(legacy=True)
        results = {await classify(spec, m, probe) for _ in range(3)}
        assert results == {Classification.REVIEW_FOR_REMOVAL}
