"""Entry point for updating dependency files."""

import logging
from collections.abc import Sequence

import httpx

from .config import Settings
from .context import ResolutionContext
from .errors import DependencyFileNotFound
from .models import Dependency, DependencyFile
from .registry_client import RegistryClient
from .strategy import STRATEGIES, select_strategy

logger = logging.getLogger(__name__)


def check_required_files(files: Sequence[DependencyFile], dependency: Dependency) -> None:
    """Every requirement must point at a supplied file."""
    names = {f.name for f in files}
    for requirement in (*dependency.requirements, *dependency.previous_requirements):
        if requirement.file not in names:
            raise DependencyFileNotFound(requirement.file)


async def updated_dependency_files(
    files: Sequence[DependencyFile],
    dependency: Dependency,
    credentials: Sequence[dict] = (),
    *,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[DependencyFile]:
    """Compute the files that change when ``dependency`` is updated.

    Args:
        files: Every dependency file of the project
        dependency: The dependency change to apply
        credentials: Registry credentials
        settings: Network and resolution settings
        client: An async HTTP client to share between calls

    Returns:
        The new or modified files, in input order; unchanged files are omitted

    Raises:
        UnsupportedFileSet: If no strategy applies to the file set
        DependencyFileNotFound: If a requirement names a missing file
        DepbumpError: Whatever the selected strategy raises
    """
    check_required_files(files, dependency)
    kind = select_strategy(files)
    logger.debug("Updating %s with the %s strategy", dependency.name, kind.value)

    settings = settings or Settings()
    originals = {f.name: f.content for f in files}

    async with RegistryClient(settings, client=client) as registry:
        context = ResolutionContext(client=registry, settings=settings)
        updater = STRATEGIES[kind](files, dependency, credentials, context)
        updated = await updater.updated_dependency_files()

    return [f for f in updated if originals.get(f.name) != f.content]
