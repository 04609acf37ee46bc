"""Updates for Pipfile projects with a Pipfile.lock."""

import hashlib
import json
import logging
import posixpath
import tomllib

from packaging.utils import canonicalize_name

from ..errors import DependencyFileNotResolvable
from ..file_updater import FileUpdater
from ..models import DependencyFile
from .declaration_replacer import DeclarationReplacer, pipfile_section
from .package_index import PackageIndex

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = {"name": "pypi", "url": "https://pypi.org/simple", "verify_ssl": True}


def pipfile_hash(pipfile_content: str) -> str:
    """The ``_meta.hash.sha256`` pipenv records for a Pipfile."""
    data = tomllib.loads(pipfile_content)
    hashed = {
        "_meta": {
            "sources": data.get("source", [DEFAULT_SOURCE]),
            "requires": data.get("requires", {}),
        },
        "default": data.get("packages", {}),
        "develop": data.get("dev-packages", {}),
    }
    serialized = json.dumps(hashed, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


class PipfileFileUpdater(FileUpdater):
    """Rewrites the Pipfile declaration and the matching Pipfile.lock entry."""

    async def updated_dependency_files(self) -> list[DependencyFile]:
        pipfile, lockfile = self._pipfile_and_lockfile()
        working = {f.name: f for f in self.dependency_files}

        for new, old in self.dependency.changed_requirements():
            if new.file != pipfile.name:
                continue
            if old is None or old.requirement is None or new.requirement is None:
                raise DependencyFileNotResolvable(f"No previous requirement for {self.dependency.name}")

            current = working[pipfile.name]
            content = DeclarationReplacer(
                current.content,
                self.dependency.name,
                old.requirement,
                new.requirement,
                pipfile_section,
            ).updated_content()
            if content == current.content:
                raise DependencyFileNotResolvable(
                    f"Declaration of {self.dependency.name} not found in {pipfile.name}"
                )
            working[pipfile.name] = current.with_content(content)

        working[lockfile.name] = await self._updated_lockfile(lockfile, working[pipfile.name])
        return self.changed_files(working)

    async def _updated_lockfile(self, lockfile: DependencyFile, pipfile: DependencyFile) -> DependencyFile:
        if self.dependency.version is None:
            raise DependencyFileNotResolvable(f"No target version for {self.dependency.name}")

        lock = json.loads(lockfile.content)
        name = canonicalize_name(self.dependency.name)

        entries = [
            packages[key]
            for group, packages in lock.items()
            if group != "_meta" and isinstance(packages, dict)
            for key in packages
            if canonicalize_name(key) == name and "version" in packages[key]
        ]
        if not entries:
            raise DependencyFileNotResolvable(f"{self.dependency.name} not found in {lockfile.name}")

        hashes = await PackageIndex(self.context).release_hashes(self.dependency.name, self.dependency.version)
        for entry in entries:
            entry["version"] = f"=={self.dependency.version}"
            entry["hashes"] = [f"sha256:{digest}" for digest in hashes]

        lock.setdefault("_meta", {})["hash"] = {"sha256": pipfile_hash(pipfile.content)}
        logger.debug("Updated %d lock entries for %s", len(entries), self.dependency.name)
        return lockfile.with_content(json.dumps(lock, indent=4, sort_keys=True) + "\n")

    def _pipfile_and_lockfile(self) -> tuple[DependencyFile, DependencyFile]:
        pipfiles = [f for f in self.dependency_files if posixpath.basename(f.name) == "Pipfile"]
        for pipfile in pipfiles:
            lockfile = self.get_original_file(posixpath.join(posixpath.dirname(pipfile.name), "Pipfile.lock"))
            if lockfile is not None:
                return pipfile, lockfile
        raise DependencyFileNotResolvable("No Pipfile with a Pipfile.lock found")
