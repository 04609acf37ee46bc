"""Base class for update strategies."""

from collections.abc import Sequence

from .context import ResolutionContext
from .errors import DependencyFileNotFound
from .models import Dependency, DependencyFile


class FileUpdater:
    """Produces updated dependency files for one dependency change.

    Subclasses implement ``updated_dependency_files`` and return only the
    files whose content changed.
    """

    def __init__(
        self,
        dependency_files: Sequence[DependencyFile],
        dependency: Dependency,
        credentials: Sequence[dict],
        context: ResolutionContext,
    ):
        self.dependency_files = list(dependency_files)
        self.dependency = dependency
        self.credentials = credentials
        self.context = context

    async def updated_dependency_files(self) -> list[DependencyFile]:
        raise NotImplementedError

    def get_original_file(self, name: str) -> DependencyFile | None:
        return next((f for f in self.dependency_files if f.name == name), None)

    def require_file(self, name: str) -> DependencyFile:
        file = self.get_original_file(name)
        if file is None:
            raise DependencyFileNotFound(name)
        return file

    def changed_files(self, working: dict[str, DependencyFile]) -> list[DependencyFile]:
        """Working copies that differ from the originals, in input order."""
        return [
            working[f.name]
            for f in self.dependency_files
            if f.name in working and working[f.name].content != f.content
        ]
