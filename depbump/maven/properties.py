"""Evaluation of ``${property}`` placeholders in POM files."""

import logging
from collections.abc import Sequence

from ..context import ResolutionContext
from ..errors import DependencyFileNotEvaluatable, ManifestChainTooDeep
from ..models import DependencyFile, Property
from .parent import ParentPomFinder
from .pom import PROPERTY_REGEX, child_path, parse_pom

logger = logging.getLogger(__name__)


class PropertyValueFinder:
    """Looks up property values in a POM and, failing that, its ancestors."""

    def __init__(
        self,
        dependency_files: Sequence[DependencyFile],
        context: ResolutionContext,
        credentials: Sequence[dict] = (),
    ):
        self.dependency_files = dependency_files
        self.context = context
        self.credentials = credentials
        self.parent_finder = ParentPomFinder(dependency_files, context, credentials)

    async def property_details(
        self, property_name: str, callsite_pom: DependencyFile
    ) -> Property | None:
        """Find where a property is declared, walking up the parent chain.

        Args:
            property_name: Name inside the placeholder, e.g. ``spring.version``
            callsite_pom: The POM the placeholder appears in

        Returns:
            The property with its value and declaring file, or None if no POM
            in the chain declares it

        Raises:
            ManifestChainTooDeep: If the chain is longer than the depth limit
        """
        key = (callsite_pom, property_name)
        if key in self.context.properties:
            return self.context.properties[key]

        details = await self._walk_chain(property_name, callsite_pom)
        self.context.properties[key] = details
        return details

    async def evaluated_value(self, value: str, pom: DependencyFile) -> str:
        """Substitute every placeholder in ``value``.

        Substituted values are not expanded again.

        Raises:
            DependencyFileNotEvaluatable: If any property cannot be found
        """
        names = list(dict.fromkeys(m.group("property") for m in PROPERTY_REGEX.finditer(value)))
        if not names:
            return value

        resolved = {}
        for name in names:
            details = await self.property_details(name, pom)
            if details is None:
                raise DependencyFileNotEvaluatable(f"Property not found: {name}")
            resolved[name] = details.value

        return PROPERTY_REGEX.sub(lambda m: resolved[m.group("property")], value)

    async def _walk_chain(self, property_name: str, callsite_pom: DependencyFile) -> Property | None:
        # Avoid a circular import; origins of a POM may themselves need
        # property evaluation.
        from .repositories import RepositoriesFinder

        repositories = RepositoriesFinder(
            self.dependency_files,
            self.context,
            credentials=self.credentials,
            evaluate_properties=False,
        )
        max_depth = self.context.settings.max_chain_depth

        pom = callsite_pom
        visited: set[DependencyFile] = set()
        depth = 0
        while pom is not None and pom not in visited:
            if depth > max_depth:
                raise ManifestChainTooDeep(
                    f"Gave up looking for property {property_name} after "
                    f"{max_depth} parent POMs"
                )
            visited.add(pom)

            value = self._declared_value(property_name, pom)
            if value is not None:
                return Property(name=property_name, value=value, declaring_file=pom.name)

            repo_urls = await repositories.repository_urls(pom, exclude_inherited=True)
            pom = await self.parent_finder.find_parent(pom, repo_urls)
            depth += 1

        logger.debug("Property %s not declared by %s or its parents", property_name, callsite_pom.name)
        return None

    def _declared_value(self, property_name: str, pom: DependencyFile) -> str | None:
        root = parse_pom(pom.content)
        if root is None:
            return None

        if property_name.startswith("project."):
            node = child_path(root, property_name.split(".")[1:])
        else:
            node = child_path(root, ["properties", property_name])

        if node is None:
            return None
        return (node.text or "").strip()
