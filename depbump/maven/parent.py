"""Parent POM lookup, local first and then remote."""

from collections.abc import Sequence

import httpx

from ..context import ResolutionContext
from ..models import DependencyFile
from .pom import is_pom, parse_pom, pom_name, text_at

REMOTE_POM_NAME = "remote_pom.xml"

# Private repositories are tried before failing over to Central, so keep to
# one retry against slow servers whatever the configured limit.
REMOTE_POM_RETRY_LIMIT = 1


def remote_pom_url(group_id: str, artifact_id: str, version: str, base_repo_url: str) -> str:
    """URL of a published POM in a Maven 2 layout repository."""
    return (
        f"{base_repo_url}/"
        f"{group_id.replace('.', '/')}/{artifact_id}/{version}/"
        f"{artifact_id}-{version}.pom"
    )


def urls_from_credentials(credentials: Sequence[dict]) -> list[str]:
    """Repository URLs supplied through ``maven_repository`` credentials."""
    urls = []
    for cred in credentials:
        if cred.get("type") != "maven_repository":
            continue
        url = (cred.get("url") or "").strip()
        if url.endswith("/"):
            url = url[:-1]
        if url:
            urls.append(url)
    return urls


class ParentPomFinder:
    """Finds the parent of a POM among local files or remote repositories."""

    def __init__(
        self,
        dependency_files: Sequence[DependencyFile],
        context: ResolutionContext,
        credentials: Sequence[dict] = (),
    ):
        self.dependency_files = dependency_files
        self.context = context
        self.credentials = credentials
        self._internal_poms: dict[str, DependencyFile] | None = None

    @property
    def internal_dependency_poms(self) -> dict[str, DependencyFile]:
        """Local POMs keyed by ``groupId:artifactId``."""
        if self._internal_poms is None:
            self._internal_poms = {}
            for file in self.dependency_files:
                root = parse_pom(file.content)
                if root is None or root.tag != "project":
                    continue
                name = pom_name(root)
                if name:
                    self._internal_poms[name] = file
        return self._internal_poms

    async def find_parent(
        self, pom: DependencyFile, repo_urls: Sequence[str]
    ) -> DependencyFile | None:
        """Find the parent POM of ``pom``.

        Args:
            pom: The POM whose parent is wanted
            repo_urls: Repository URLs to try before credentials and Central

        Returns:
            The parent as a dependency file, or None if there is no parent or
            it could not be determined
        """
        root = parse_pom(pom.content)
        if root is None:
            return None

        group_id = text_at(root, "parent/groupId")
        artifact_id = text_at(root, "parent/artifactId")
        version = text_at(root, "parent/version")

        if not group_id or not artifact_id:
            return None

        name = f"{group_id}:{artifact_id}"
        if name in self.internal_dependency_poms:
            return self.internal_dependency_poms[name]

        # A range leaves more than one candidate parent
        if not version or "," in version:
            return None

        return await self.fetch_remote_parent_pom(group_id, artifact_id, version, repo_urls)

    async def fetch_remote_parent_pom(
        self,
        group_id: str,
        artifact_id: str,
        version: str,
        repo_urls: Sequence[str],
    ) -> DependencyFile | None:
        """Try each candidate repository in turn until one serves the POM."""
        candidates = [
            *repo_urls,
            *urls_from_credentials(self.credentials),
            self.context.settings.central_repo_url,
        ]
        for base_url in dict.fromkeys(candidates):
            url = remote_pom_url(group_id, artifact_id, version, base_url)
            try:
                response = await self.context.get(url, retry_limit=REMOTE_POM_RETRY_LIMIT)
            except (httpx.TransportError, httpx.TooManyRedirects, httpx.InvalidURL):
                continue

            if response.status_code != 200:
                continue
            if not is_pom(response.text):
                continue

            return DependencyFile(name=REMOTE_POM_NAME, content=response.text)

        return None
