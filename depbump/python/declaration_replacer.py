"""Rewriting of a dependency declaration inside Pipfile and pyproject.toml."""

import re
from collections.abc import Callable

from packaging.utils import canonicalize_name

from .requirement_replacer import RequirementReplacer

HEADER_REGEX = re.compile(r"^\s*\[\[?\s*(?P<name>[^\]]+?)\s*\]\]?\s*(?:#.*)?$")
KEY_VALUE_REGEX = re.compile(
    r"^(?P<indent>\s*)(?P<key>\"[^\"]+\"|'[^']+'|[A-Za-z0-9._-]+)\s*=\s*(?P<value>.*)$"
)
STRING_REGEX = re.compile(r"(?P<quote>[\"'])(?P<body>[^\"']*)(?P=quote)")

# Pipfile sections that are not package categories
PIPFILE_NON_PACKAGE_SECTIONS = {"source", "requires", "pipenv", "scripts"}

# PEP 621 / PEP 735 arrays of requirement strings; None means any key
REQUIREMENT_ARRAYS = {
    "project": {"dependencies"},
    "project.optional-dependencies": None,
    "dependency-groups": None,
}


def pipfile_section(name: str) -> bool:
    return name not in PIPFILE_NON_PACKAGE_SECTIONS and "." not in name


def poetry_section(name: str) -> bool:
    return name in ("tool.poetry.dependencies", "tool.poetry.dev-dependencies") or bool(
        re.fullmatch(r"tool\.poetry\.group\.[^.]+\.dependencies", name)
    )


def _unquote(key: str) -> str:
    if key[:1] in "\"'":
        return key[1:-1]
    return key


class DeclarationReplacer:
    """Replaces a dependency's requirement string in a TOML manifest."""

    def __init__(
        self,
        content: str,
        dependency_name: str,
        old_requirement: str,
        new_requirement: str,
        is_dependency_section: Callable[[str], bool],
    ):
        self.content = content
        self.dependency_name = dependency_name
        self.canonical_name = canonicalize_name(dependency_name)
        self.old_requirement = old_requirement
        self.new_requirement = new_requirement
        self.is_dependency_section = is_dependency_section

    def updated_content(self) -> str:
        lines = self.content.splitlines(keepends=True)
        section = ""
        in_array = False

        for index, line in enumerate(lines):
            header = HEADER_REGEX.match(line)
            if header and not in_array:
                section = header.group("name").replace('"', "").replace("'", "")
                continue

            if in_array:
                lines[index] = self._replace_in_requirement_strings(line)
                if "]" in STRING_REGEX.sub("", line):
                    in_array = False
                continue

            match = KEY_VALUE_REGEX.match(line)
            if match is None:
                continue
            key = _unquote(match.group("key"))

            if self._is_requirement_array(section, key):
                lines[index] = self._replace_in_requirement_strings(line)
                value = STRING_REGEX.sub("", match.group("value"))
                in_array = value.lstrip().startswith("[") and "]" not in value
            elif self.is_dependency_section(section) and canonicalize_name(key) == self.canonical_name:
                lines[index] = self._replace_value(line, match)
            elif self._is_dependency_subtable(section) and key == "version":
                lines[index] = self._replace_value(line, match)

        return "".join(lines)

    def _is_requirement_array(self, section: str, key: str) -> bool:
        if section not in REQUIREMENT_ARRAYS:
            return False
        keys = REQUIREMENT_ARRAYS[section]
        return keys is None or key in keys

    def _is_dependency_subtable(self, section: str) -> bool:
        parent, _, name = section.rpartition(".")
        return bool(parent) and self.is_dependency_section(parent) and canonicalize_name(name) == self.canonical_name

    def _replace_value(self, line: str, match: re.Match) -> str:
        value_start = match.start("value")
        value = line[value_start:]
        old = re.escape(self.old_requirement)

        if value.startswith("{"):
            pattern = re.compile(r"(\bversion\s*=\s*)([\"'])" + old + r"\2")
            replaced = pattern.sub(lambda m: m.group(1) + m.group(2) + self.new_requirement + m.group(2), value, count=1)
        else:
            pattern = re.compile(r"^([\"'])" + old + r"\1")
            replaced = pattern.sub(lambda m: m.group(1) + self.new_requirement + m.group(1), value, count=1)

        return line[:value_start] + replaced

    def _replace_in_requirement_strings(self, line: str) -> str:
        def replace(match: re.Match) -> str:
            body = RequirementReplacer(
                match.group("body"),
                self.dependency_name,
                self.old_requirement,
                self.new_requirement,
            ).updated_content()
            return match.group("quote") + body + match.group("quote")

        return STRING_REGEX.sub(replace, line)
