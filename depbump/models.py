"""Core data models for depbump."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace

# The Central Repository is included in the Super POM, which is always
# inherited from.
CENTRAL_REPO_URL = "https://repo.maven.apache.org/maven2"


@dataclass(frozen=True)
class DependencyFile:
    """A dependency file as supplied by the caller."""

    name: str
    content: str
    directory: str = "/"

    @property
    def identity(self) -> tuple[str, str]:
        return (self.directory, self.name)

    def with_content(self, content: str) -> "DependencyFile":
        """Return a copy of this file carrying new content."""
        return replace(self, content=content)


@dataclass(frozen=True)
class Requirement:
    """One place a dependency is declared."""

    file: str
    requirement: str | None
    groups: tuple[str, ...] = ()
    source: Mapping | None = None
    metadata: Mapping = field(default_factory=dict)


@dataclass(frozen=True)
class Dependency:
    """A dependency change request."""

    name: str
    version: str | None
    requirements: tuple[Requirement, ...]
    previous_requirements: tuple[Requirement, ...] = ()
    previous_version: str | None = None
    package_manager: str = "pip"  # pip, maven

    def changed_requirements(self) -> Iterator[tuple[Requirement, Requirement | None]]:
        """Yield (new, previous) pairs whose requirement actually changed."""
        for index, new in enumerate(self.requirements):
            old = (
                self.previous_requirements[index]
                if index < len(self.previous_requirements)
                else None
            )
            if old is not None and old == new:
                continue
            yield new, old


@dataclass(frozen=True)
class Origin:
    """A package source (repository) URL, optionally named."""

    url: str
    id: str | None = None


SUPER_POM = Origin(url=CENTRAL_REPO_URL, id="central")


@dataclass(frozen=True)
class Property:
    """A property value and the file it was declared in."""

    name: str
    value: str
    declaring_file: str
