"""Updates for plain requirement listings and lock-less manifests."""

import posixpath

from ..errors import DependencyFileNotResolvable
from ..file_updater import FileUpdater
from ..models import DependencyFile
from .declaration_replacer import DeclarationReplacer, pipfile_section, poetry_section
from .package_index import PackageIndex
from .requirement_replacer import RequirementReplacer

# Lower sorts first; only one format is updated per call
PIPFILE_FORMAT = 0
PYPROJECT_FORMAT = 1
REQUIREMENTS_FORMAT = 2


def file_format(name: str) -> int:
    basename = posixpath.basename(name)
    if basename == "Pipfile":
        return PIPFILE_FORMAT
    if basename == "pyproject.toml":
        return PYPROJECT_FORMAT
    return REQUIREMENTS_FORMAT


class RequirementFileUpdater(FileUpdater):
    """Rewrites the declared requirement in each declaring file.

    When the dependency is declared in manifests of different formats, only
    the files of the highest-priority format are updated.
    """

    async def updated_dependency_files(self) -> list[DependencyFile]:
        changed = [
            (new, old)
            for new, old in self.dependency.changed_requirements()
            if old is not None and old.requirement is not None and new.requirement is not None
        ]
        if not changed:
            raise DependencyFileNotResolvable(
                f"{self.dependency.name} is a sub-dependency, but no lockfile exists"
            )

        chosen_format = min(file_format(new.file) for new, _ in changed)
        working = {f.name: f for f in self.dependency_files}

        for new, old in changed:
            if file_format(new.file) != chosen_format:
                continue
            file = self.require_file(new.file)
            current = working[file.name]
            content = await self._replace(current, old.requirement, new.requirement)
            if content == current.content:
                raise DependencyFileNotResolvable(
                    f"Declaration of {self.dependency.name} at {old.requirement} not found in {file.name}"
                )
            working[file.name] = current.with_content(content)

        return self.changed_files(working)

    async def _replace(self, file: DependencyFile, old_requirement: str, new_requirement: str) -> str:
        name_format = file_format(file.name)
        if name_format != REQUIREMENTS_FORMAT:
            section = pipfile_section if name_format == PIPFILE_FORMAT else poetry_section
            return DeclarationReplacer(
                file.content, self.dependency.name, old_requirement, new_requirement, section
            ).updated_content()

        replaced = RequirementReplacer(
            file.content, self.dependency.name, old_requirement, new_requirement
        ).updated_content()
        if replaced == file.content or "--hash=" not in file.content or not self.dependency.version:
            return replaced

        new_hashes = await PackageIndex(self.context).release_hashes(
            self.dependency.name, self.dependency.version
        )
        return RequirementReplacer(
            file.content, self.dependency.name, old_requirement, new_requirement, new_hashes=new_hashes
        ).updated_content()
