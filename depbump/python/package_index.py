"""Release metadata from a Python package index."""

import httpx
from packaging.utils import canonicalize_name

from ..context import ResolutionContext
from ..errors import PackageIndexError


class PackageIndex:
    """Reads published release files from the package index JSON API."""

    def __init__(self, context: ResolutionContext):
        """Initialize package index.

        Args:
            context: Per-call caches, settings and registry client
        """
        self.context = context
        self.index_url = context.settings.package_index_url.rstrip("/")

    async def release_files(self, package_name: str, version: str) -> list[tuple[str, str]]:
        """Get every file published for a release.

        Args:
            package_name: Name of the package
            version: Exact release version

        Returns:
            (filename, sha256 hex digest) pairs sorted by filename

        Raises:
            PackageIndexError: If the release cannot be fetched or has no files
        """
        metadata = await self._fetch_release_metadata(package_name, version)
        files = {
            file_info["filename"]: file_info["digests"]["sha256"]
            for file_info in metadata.get("urls", [])
            if file_info.get("filename") and file_info.get("digests", {}).get("sha256")
        }
        if not files:
            raise PackageIndexError(f"No files published for {package_name} {version}")
        return sorted(files.items())

    async def release_hashes(self, package_name: str, version: str) -> list[str]:
        """Sorted sha256 digests of every file published for a release."""
        files = await self.release_files(package_name, version)
        return sorted({digest for _, digest in files})

    async def _fetch_release_metadata(self, package_name: str, version: str) -> dict:
        """Fetch release metadata from the index.

        Args:
            package_name: Name of the package
            version: Exact release version

        Returns:
            Release metadata dict
        """
        key = (canonicalize_name(package_name), version)
        # Check cache first
        if key in self.context.releases:
            return self.context.releases[key]

        url = f"{self.index_url}/pypi/{key[0]}/{version}/json"

        try:
            response = await self.context.client.get(url)
            if response.status_code == 404:
                raise PackageIndexError(f"Release {package_name} {version} not found")
            response.raise_for_status()
            metadata = response.json()
        except httpx.TimeoutException:
            raise PackageIndexError(f"Timeout fetching metadata for {package_name}")
        except httpx.HTTPStatusError as e:
            raise PackageIndexError(f"HTTP error fetching {package_name}: {e}")
        except (httpx.HTTPError, ValueError) as e:
            raise PackageIndexError(f"Network error fetching {package_name}: {e}")

        # Cache the result
        self.context.releases[key] = metadata
        return metadata
