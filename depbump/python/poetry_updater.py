"""Updates for Poetry projects (pyproject.toml with poetry.lock)."""

import hashlib
import json
import logging
import posixpath
import re
import tomllib

from packaging.utils import canonicalize_name

from ..errors import DependencyFileNotResolvable
from ..file_updater import FileUpdater
from ..models import DependencyFile
from .declaration_replacer import DeclarationReplacer, poetry_section
from .package_index import PackageIndex

logger = logging.getLogger(__name__)

LOCKFILE_NAMES = ("poetry.lock", "pyproject.lock")

LEGACY_HASH_KEYS = ["dependencies", "source", "extras", "dev-dependencies"]
RELEVANT_HASH_KEYS = [*LEGACY_HASH_KEYS, "group"]

STRING_VALUE = r"(?P<head>^\s*{key}\s*=\s*\")[^\"]*(?P<tail>\".*$)"


def content_hash(pyproject_content: str) -> str:
    """The ``content-hash`` Poetry records for a pyproject.toml."""
    poetry = tomllib.loads(pyproject_content).get("tool", {}).get("poetry", {})
    relevant = {}
    for key in RELEVANT_HASH_KEYS:
        data = poetry.get(key)
        if data is None and key not in LEGACY_HASH_KEYS:
            continue
        relevant[key] = data
    return hashlib.sha256(json.dumps(relevant, sort_keys=True).encode()).hexdigest()


def _replace_string_value(line: str, key: str, value: str) -> str:
    pattern = re.compile(STRING_VALUE.format(key=re.escape(key)), re.DOTALL)
    return pattern.sub(lambda m: m.group("head") + value + m.group("tail"), line, count=1)


def _array_end(lines: list[str], start: int) -> int:
    """Index one past the line closing the array opened at ``start``."""
    if lines[start].rstrip().endswith("]"):
        return start + 1
    end = start + 1
    while end < len(lines) and lines[end].strip() != "]":
        end += 1
    return min(end + 1, len(lines))


def _files_array(key: str, files: list[tuple[str, str]], indent: str = "    ") -> list[str]:
    entries = [f'{indent}{{file = "{name}", hash = "sha256:{digest}"}},\n' for name, digest in files]
    return [f"{key} = [\n", *entries, "]\n"]


class PoetryFileUpdater(FileUpdater):
    """Rewrites the pyproject declaration and the matching poetry.lock entry."""

    async def updated_dependency_files(self) -> list[DependencyFile]:
        pyproject, lockfile = self._pyproject_and_lockfile()
        working = {f.name: f for f in self.dependency_files}

        for new, old in self.dependency.changed_requirements():
            if new.file != pyproject.name:
                continue
            if old is None or old.requirement is None or new.requirement is None:
                raise DependencyFileNotResolvable(f"No previous requirement for {self.dependency.name}")

            current = working[pyproject.name]
            content = DeclarationReplacer(
                current.content,
                self.dependency.name,
                old.requirement,
                new.requirement,
                poetry_section,
            ).updated_content()
            if content == current.content:
                raise DependencyFileNotResolvable(
                    f"Declaration of {self.dependency.name} not found in {pyproject.name}"
                )
            working[pyproject.name] = current.with_content(content)

        working[lockfile.name] = await self._updated_lockfile(lockfile, working[pyproject.name])
        return self.changed_files(working)

    def _pyproject_and_lockfile(self) -> tuple[DependencyFile, DependencyFile]:
        pyprojects = [f for f in self.dependency_files if posixpath.basename(f.name) == "pyproject.toml"]
        for pyproject in pyprojects:
            directory = posixpath.dirname(pyproject.name)
            for name in LOCKFILE_NAMES:
                lockfile = self.get_original_file(posixpath.join(directory, name))
                if lockfile is not None:
                    return pyproject, lockfile
        raise DependencyFileNotResolvable("No pyproject.toml with a Poetry lockfile found")

    async def _updated_lockfile(self, lockfile: DependencyFile, pyproject: DependencyFile) -> DependencyFile:
        if self.dependency.version is None:
            raise DependencyFileNotResolvable(f"No target version for {self.dependency.name}")

        lines = lockfile.content.splitlines(keepends=True)
        name = canonicalize_name(self.dependency.name)
        files = await PackageIndex(self.context).release_files(self.dependency.name, self.dependency.version)

        if not self._update_package_blocks(lines, name, files):
            raise DependencyFileNotResolvable(f"{self.dependency.name} not found in {lockfile.name}")

        self._update_metadata(lines, name, files, content_hash(pyproject.content))
        return lockfile.with_content("".join(lines))

    def _update_package_blocks(self, lines: list[str], name: str, files: list[tuple[str, str]]) -> bool:
        updated = False
        index = 0
        while index < len(lines):
            if lines[index].strip() != "[[package]]":
                index += 1
                continue

            end = index + 1
            while end < len(lines) and not lines[end].startswith("["):
                end += 1

            block = lines[index:end]
            names = [re.match(r'^name\s*=\s*"([^"]*)"', line) for line in block]
            if any(m and canonicalize_name(m.group(1)) == name for m in names):
                block = self._updated_package_block(block, files)
                lines[index:end] = block
                end = index + len(block)
                updated = True
            index = end
        return updated

    def _updated_package_block(self, block: list[str], files: list[tuple[str, str]]) -> list[str]:
        result = []
        position = 0
        while position < len(block):
            line = block[position]
            if re.match(r"^version\s*=", line):
                result.append(_replace_string_value(line, "version", self.dependency.version))
            elif re.match(r"^files\s*=\s*\[", line):
                end = _array_end(block, position)
                result.extend(_files_array("files", files))
                position = end
                continue
            else:
                result.append(line)
            position += 1
        return result

    def _update_metadata(self, lines: list[str], name: str, files: list[tuple[str, str]], new_hash: str) -> None:
        section = ""
        index = 0
        while index < len(lines):
            line = lines[index]
            header = re.match(r"^\[([^\[\]]+)\]\s*$", line)
            if header:
                section = header.group(1).strip()
            elif section == "metadata" and re.match(r"^content-hash\s*=", line):
                lines[index] = _replace_string_value(line, "content-hash", new_hash)
            elif section == "metadata.files":
                key = re.match(r'^"?([A-Za-z0-9._-]+)"?\s*=\s*\[', line)
                if key and canonicalize_name(key.group(1)) == name:
                    end = _array_end(lines, index)
                    replacement = _files_array(key.group(0).split("=")[0].strip(), files)
                    lines[index:end] = replacement
                    index += len(replacement)
                    continue
            index += 1
