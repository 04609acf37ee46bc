"""
Repository (origin) collection for Maven POMs.

For documentation, see:
- http://maven.apache.org/pom.html#Repositories
- http://maven.apache.org/guides/mini/guide-multiple-repositories.html
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace

from ..context import ResolutionContext
from ..models import SUPER_POM, DependencyFile, Origin
from .parent import ParentPomFinder, urls_from_credentials
from .pom import contains_property, parse_pom, repository_nodes, text_at
from .properties import PropertyValueFinder

logger = logging.getLogger(__name__)


def deduplicate(origins: Iterable[Origin]) -> list[Origin]:
    """Drop empty URLs, later entries reusing an id, and repeated URLs."""
    ids: set[str] = set()
    urls: set[str] = set()
    result = []
    for origin in origins:
        if not origin.url:
            continue
        if origin.id is not None:
            if origin.id in ids:
                continue
            ids.add(origin.id)
        if origin.url in urls:
            continue
        urls.add(origin.url)
        result.append(origin)
    return result


class RepositoriesFinder:
    """Collects the repositories a POM can resolve artifacts from."""

    def __init__(
        self,
        dependency_files: Sequence[DependencyFile],
        context: ResolutionContext,
        credentials: Sequence[dict] = (),
        evaluate_properties: bool = True,
    ):
        """Initialize repositories finder.

        Args:
            dependency_files: All files of the project
            context: Per-call caches and registry client
            credentials: Credentials; ``maven_repository`` entries add origins
            evaluate_properties: Whether placeholder URLs are evaluated. The
                property finder disables this, since it needs repository URLs
                to fetch the parents it evaluates properties from.
        """
        self.dependency_files = dependency_files
        self.context = context
        self.credentials = credentials
        self.evaluate_properties = evaluate_properties
        self.parent_finder = ParentPomFinder(dependency_files, context, credentials)
        self._property_value_finder: PropertyValueFinder | None = None

    @property
    def super_pom(self) -> Origin:
        return replace(SUPER_POM, url=self.context.settings.central_repo_url)

    async def origins(self, pom: DependencyFile, exclude_inherited: bool = False) -> list[Origin]:
        """Collect origins from this POM and its parents.

        Credential origins come first, then the POM's own declarations, then
        each ancestor's, then Maven Central.
        """
        entries = await self._gather_origins(pom, exclude_inherited)
        from_credentials = [Origin(url=url) for url in urls_from_credentials(self.credentials)]
        return deduplicate(from_credentials + entries)

    async def repository_urls(self, pom: DependencyFile, exclude_inherited: bool = False) -> list[str]:
        """Collect repository URLs from this POM and its parents."""
        return [origin.url for origin in await self.origins(pom, exclude_inherited)]

    async def _gather_origins(self, pom: DependencyFile, exclude_inherited: bool) -> list[Origin]:
        gathered: list[Origin] = []
        visited: set[DependencyFile] = set()
        max_depth = self.context.settings.max_chain_depth

        current = pom
        while True:
            own = await self._repos_in_pom(current)
            gathered.extend(own)
            if exclude_inherited:
                break

            visited.add(current)
            if len(visited) > max_depth:
                logger.warning(
                    "Stopped collecting repositories for %s after %d parent POMs",
                    pom.name,
                    max_depth,
                )
                break

            parent = await self.parent_finder.find_parent(current, [o.url for o in own])
            if parent is None or parent in visited:
                break
            current = parent

        gathered.append(self.super_pom)
        return gathered

    async def _repos_in_pom(self, pom: DependencyFile) -> list[Origin]:
        root = parse_pom(pom.content)
        if root is None:
            return []

        repos = []
        for node in repository_nodes(root):
            url = text_at(node, "url")
            if not url:
                continue
            if contains_property(url) and not self.evaluate_properties:
                continue
            if not url.startswith("http"):
                continue

            url = await self._evaluated_value(url, pom)
            if url.endswith("/"):
                url = url[:-1]
            repos.append(Origin(url=url, id=text_at(node, "id") or None))
        return repos

    async def _evaluated_value(self, value: str, pom: DependencyFile) -> str:
        if not contains_property(value):
            return value
        return await self.property_value_finder.evaluated_value(value, pom)

    # Cached, since this can make calls to the registry (to get property
    # values from parent POMs)
    @property
    def property_value_finder(self) -> PropertyValueFinder:
        if self._property_value_finder is None:
            self._property_value_finder = PropertyValueFinder(
                self.dependency_files, self.context, self.credentials
            )
        return self._property_value_finder
