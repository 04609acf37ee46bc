"""Update strategy selection for a set of dependency files."""

import posixpath
from collections.abc import Sequence
from enum import Enum

from .errors import UnsupportedFileSet
from .file_updater import FileUpdater
from .maven.updater import MavenFileUpdater
from .models import DependencyFile
from .python.pip_compile_updater import PipCompileFileUpdater
from .python.pipfile_updater import PipfileFileUpdater
from .python.poetry_updater import LOCKFILE_NAMES, PoetryFileUpdater
from .python.requirements_updater import RequirementFileUpdater


class StrategyKind(str, Enum):
    """Mutually exclusive ways of updating a file set."""

    MAVEN = "maven"  # pom.xml
    PIPFILE = "pipfile"  # Pipfile + Pipfile.lock
    POETRY = "poetry"  # pyproject.toml + poetry.lock
    PIP_COMPILE = "pip_compile"  # requirements.in + requirements.txt
    REQUIREMENTS = "requirements"  # flat requirement listings


STRATEGIES: dict[StrategyKind, type[FileUpdater]] = {
    StrategyKind.MAVEN: MavenFileUpdater,
    StrategyKind.PIPFILE: PipfileFileUpdater,
    StrategyKind.POETRY: PoetryFileUpdater,
    StrategyKind.PIP_COMPILE: PipCompileFileUpdater,
    StrategyKind.REQUIREMENTS: RequirementFileUpdater,
}


def _has_pair(names: set[str], manifest: str, lockfiles: Sequence[str]) -> bool:
    for name in names:
        if posixpath.basename(name) != manifest:
            continue
        directory = posixpath.dirname(name)
        if any(posixpath.join(directory, lockfile) in names for lockfile in lockfiles):
            return True
    return False


def _has_compiled_pair(names: set[str]) -> bool:
    return any(name.endswith(".in") and name[: -len(".in")] + ".txt" in names for name in names)


def select_strategy(files: Sequence[DependencyFile]) -> StrategyKind:
    """Pick the update strategy for a file set from its file names.

    Args:
        files: The dependency files of one project

    Returns:
        The first strategy whose naming rule matches; flat requirements when
        no more specific rule does

    Raises:
        UnsupportedFileSet: If the file set is empty
    """
    if not files:
        raise UnsupportedFileSet("No dependency files supplied")

    names = {f.name for f in files}

    if any(posixpath.basename(name) == "pom.xml" for name in names):
        return StrategyKind.MAVEN
    if _has_pair(names, "Pipfile", ["Pipfile.lock"]):
        return StrategyKind.PIPFILE
    if _has_pair(names, "pyproject.toml", LOCKFILE_NAMES):
        return StrategyKind.POETRY
    if _has_compiled_pair(names):
        return StrategyKind.PIP_COMPILE

    return StrategyKind.REQUIREMENTS
