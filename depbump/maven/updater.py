"""Version updates for dependencies declared in POM files."""

import logging
import re
import xml.etree.ElementTree as ET

from ..errors import DependencyFileNotResolvable
from ..file_updater import FileUpdater
from ..models import DependencyFile, Requirement
from .pom import PROPERTY_REGEX, contains_property
from .properties import PropertyValueFinder

logger = logging.getLogger(__name__)

DECLARATION_TAGS = ("dependency", "plugin", "extension")
DEFAULT_PLUGIN_GROUP_ID = "org.apache.maven.plugins"


def _declaration_spans(content: str, tag: str):
    pattern = re.compile(rf"<{tag}>.*?</{tag}>", re.DOTALL)
    for match in pattern.finditer(content):
        yield match.start(), match.end()


def _declared_coordinates(block: str, tag: str) -> tuple[str, str | None] | None:
    try:
        node = ET.fromstring(block)
    except ET.ParseError:
        return None

    group_id = (node.findtext("groupId") or "").strip()
    artifact_id = (node.findtext("artifactId") or "").strip()
    if not group_id and tag == "plugin":
        group_id = DEFAULT_PLUGIN_GROUP_ID
    if not group_id or not artifact_id:
        return None

    version = node.findtext("version")
    return f"{group_id}:{artifact_id}", version.strip() if version is not None else None


def _replace_own_version(block: str, old: str, new: str) -> str:
    """Rewrite the block's own <version>, skipping nested <dependencies>."""
    nested = [m.span() for m in re.finditer(r"<dependencies>.*?</dependencies>", block, re.DOTALL)]
    pattern = re.compile(r"(<version>\s*)" + re.escape(old) + r"(\s*</version>)")
    for match in pattern.finditer(block):
        if any(start <= match.start() < end for start, end in nested):
            continue
        return block[: match.start()] + match.group(1) + new + match.group(2) + block[match.end():]
    return block


class MavenFileUpdater(FileUpdater):
    """Rewrites versions in POM declarations, following property references."""

    async def updated_dependency_files(self) -> list[DependencyFile]:
        working = {f.name: f for f in self.dependency_files}
        finder = PropertyValueFinder(self.dependency_files, self.context, self.credentials)

        for new, old in self.dependency.changed_requirements():
            if old is None or old.requirement is None or new.requirement is None:
                raise DependencyFileNotResolvable(
                    f"No previous requirement for {self.dependency.name} in {new.file}"
                )
            pom = self.require_file(new.file)
            updated = await self._update_file(working, finder, pom, old, new)
            if not updated:
                raise DependencyFileNotResolvable(
                    f"Declaration of {self.dependency.name} at {old.requirement} "
                    f"not found in {new.file}"
                )

        return self.changed_files(working)

    async def _update_file(
        self,
        working: dict[str, DependencyFile],
        finder: PropertyValueFinder,
        pom: DependencyFile,
        old: Requirement,
        new: Requirement,
    ) -> bool:
        updated = False
        for tag in DECLARATION_TAGS:
            content = working[pom.name].content
            pieces = []
            position = 0
            property_versions = []
            for start, end in _declaration_spans(content, tag):
                block = content[start:end]
                coordinates = _declared_coordinates(block, tag)
                if coordinates is None or coordinates[0] != self.dependency.name:
                    continue
                version = coordinates[1]
                if version is None:
                    continue

                if contains_property(version):
                    property_versions.append(version)
                    continue

                if version == new.requirement:
                    updated = True
                elif version == old.requirement:
                    pieces.append(content[position:start])
                    pieces.append(_replace_own_version(block, old.requirement, new.requirement))
                    position = end
                    updated = True

            if pieces:
                pieces.append(content[position:])
                working[pom.name] = working[pom.name].with_content("".join(pieces))

            # Properties may be declared in this POM, so edit them only once
            # the literal rewrites above are stored.
            for version in property_versions:
                if await self._update_property(working, finder, pom, version, old, new):
                    updated = True
        return updated

    async def _update_property(
        self,
        working: dict[str, DependencyFile],
        finder: PropertyValueFinder,
        pom: DependencyFile,
        version: str,
        old: Requirement,
        new: Requirement,
    ) -> bool:
        match = PROPERTY_REGEX.fullmatch(version)
        if match is None:
            # e.g. ${revision}-SNAPSHOT; only a bare reference can be bumped
            if await finder.evaluated_value(version, pom) == old.requirement:
                raise DependencyFileNotResolvable(
                    f"Cannot update composite version {version} in {pom.name}"
                )
            return False

        property_name = match.group("property")
        details = await finder.property_details(property_name, pom)
        if details is None:
            # Evaluating raises the descriptive error
            await finder.evaluated_value(version, pom)
            return False

        if details.declaring_file not in working:
            raise DependencyFileNotResolvable(
                f"Property {property_name} is declared in a remote parent POM"
            )

        declaring = working[details.declaring_file]
        pattern = re.compile(
            rf"(<{re.escape(property_name)}>\s*)"
            + rf"({re.escape(old.requirement)}|{re.escape(new.requirement)})"
            + rf"(\s*</{re.escape(property_name)}>)"
        )
        property_match = pattern.search(declaring.content)
        if property_match is None:
            return False
        if property_match.group(2) == new.requirement:
            return True

        logger.debug("Updating property %s in %s", property_name, declaring.name)
        content = (
            declaring.content[: property_match.start()]
            + property_match.group(1)
            + new.requirement
            + property_match.group(3)
            + declaring.content[property_match.end():]
        )
        working[declaring.name] = declaring.with_content(content)
        return True
