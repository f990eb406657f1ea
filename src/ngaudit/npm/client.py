"""Async npm registry client for fetching latest package metadata and tarballs."""

from __future__ import annotations

import asyncio
import logging

import httpx

from ngaudit.npm.metadata import PackageMetadata

logger = logging.getLogger("ngaudit.npm")


class RegistryError(Exception):
    """Raised when an npm registry request fails."""


class FetchFailed(RegistryError):
    """Raised when a metadata lookup still fails after all retries."""

    def __init__(self, package_name: str, reason: str) -> None:
        self.package_name = package_name
        self.reason = reason
        super().__init__(f"Could not fetch {package_name}: {reason}")


class RegistryClient:
    """Client for the npm registry's ``/<name>/latest`` endpoint."""

    BASE_URL = "https://registry.npmjs.org"

    def __init__(
        self,
        base_url: str | None = None,
        http: httpx.AsyncClient | None = None,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    def latest_url(self, package_name: str) -> str:
        return f"{self._base_url}/{package_name}/latest"

    async def fetch_latest(self, package_name: str) -> PackageMetadata | None:
        """Fetch metadata for the latest tag of a package.

        Returns None when the registry answers 404. Any other non-2xx
        status (429 included) or transport error is retried with
        exponential backoff; once the budget is spent FetchFailed is raised.
        """
        url = self.latest_url(package_name)
        reason = "no attempts made"

        for attempt in range(self._max_retries):
            try:
                resp = await self._http.get(url)
            except httpx.TransportError as exc:
                reason = f"{type(exc).__name__}: {exc}"
            else:
                if resp.status_code == 404:
                    logger.info(f"{package_name} not found in registry")
                    return None
                if resp.is_success:
                    try:
                        data = resp.json()
                    except ValueError as exc:
                        raise FetchFailed(package_name, f"invalid JSON body: {exc}") from exc
                    if not isinstance(data, dict):
                        raise FetchFailed(package_name, "unexpected response body")
                    return PackageMetadata.from_registry(data)
                reason = f"HTTP {resp.status_code}"

            logger.warning(
                f"Fetching {package_name} failed ({reason}), "
                f"attempt {attempt + 1}/{self._max_retries}"
            )
            if attempt < self._max_retries - 1:
                await asyncio.sleep(self._retry_base_delay * (2**attempt))

        raise FetchFailed(package_name, reason)

    async def download_tarball(self, url: str) -> bytes:
        """Download a package's distribution tarball and return its bytes."""
        resp = await self._http.get(url, follow_redirects=True)
        resp.raise_for_status()
        return resp.content
