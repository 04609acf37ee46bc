"""Updates for pip-compile projects (``.in`` sources with compiled ``.txt``)."""

import logging

from ..errors import DependencyFileNotResolvable
from ..file_updater import FileUpdater
from ..models import DependencyFile
from .package_index import PackageIndex
from .requirement_replacer import RequirementReplacer

logger = logging.getLogger(__name__)


class PipCompileFileUpdater(FileUpdater):
    """Rewrites ``.in`` declarations and every compiled pin of the dependency.

    Compiled outputs pin sub-dependencies too, so a dependency without a
    changed top-level requirement is still updated wherever it is pinned at
    its previous version.
    """

    async def updated_dependency_files(self) -> list[DependencyFile]:
        working = {f.name: f for f in self.dependency_files}

        for new, old in self.dependency.changed_requirements():
            if old is None or old.requirement is None or new.requirement is None:
                continue
            file = self.require_file(new.file)
            content = await self._replace(working[file.name].content, old.requirement, new.requirement)
            if content == working[file.name].content:
                raise DependencyFileNotResolvable(
                    f"Declaration of {self.dependency.name} at {old.requirement} not found in {file.name}"
                )
            working[file.name] = working[file.name].with_content(content)

        if self.dependency.previous_version and self.dependency.version:
            old_pin = f"=={self.dependency.previous_version}"
            new_pin = f"=={self.dependency.version}"
            for file in self.dependency_files:
                if not file.name.endswith(".txt"):
                    continue
                content = await self._replace(working[file.name].content, old_pin, new_pin)
                if content != working[file.name].content:
                    logger.debug("Updated pin of %s in %s", self.dependency.name, file.name)
                    working[file.name] = working[file.name].with_content(content)

        updated = self.changed_files(working)
        if not updated:
            raise DependencyFileNotResolvable(
                f"No pin of {self.dependency.name} found in the compiled requirement files"
            )
        return updated

    async def _replace(self, content: str, old_requirement: str, new_requirement: str) -> str:
        replaced = RequirementReplacer(
            content, self.dependency.name, old_requirement, new_requirement
        ).updated_content()
        if replaced == content or "--hash=" not in content:
            return replaced

        return RequirementReplacer(
            content,
            self.dependency.name,
            old_requirement,
            new_requirement,
            new_hashes=await self._release_hashes(),
        ).updated_content()

    async def _release_hashes(self) -> list[str]:
        if self.dependency.version is None:
            raise DependencyFileNotResolvable(f"No target version for {self.dependency.name}")
        return await PackageIndex(self.context).release_hashes(self.dependency.name, self.dependency.version)
