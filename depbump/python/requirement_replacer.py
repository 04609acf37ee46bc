"""Rewriting of a single requirement in requirements.txt-style files."""

import re

from packaging.requirements import InvalidRequirement, Requirement
from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.utils import canonicalize_name

LINE_REGEX = re.compile(
    r"^(?P<prefix>\s*[A-Za-z0-9][A-Za-z0-9._-]*\s*(?:\[[^\]]*\])?\s*)"
    r"(?P<spec>[^;#\\]*?)"
    r"(?P<suffix>\s*(?:;.*|#.*|--hash.*|\\)?)$"
)
HASH_LINE_REGEX = re.compile(r"^(?P<indent>\s*)--hash=\S+(?P<trailing>\s*\\?\s*)$")


def format_hash(digest: str) -> str:
    return f"--hash=sha256:{digest}"


class RequirementReplacer:
    """Replaces the requirement of one dependency, leaving all else alone."""

    def __init__(
        self,
        content: str,
        dependency_name: str,
        old_requirement: str,
        new_requirement: str,
        new_hashes: list[str] | None = None,
    ):
        """Initialize requirement replacer.

        Args:
            content: The requirements file content
            dependency_name: Name of the dependency to rewrite
            old_requirement: Specifier currently declared, e.g. ``==2.6.1``
            new_requirement: Specifier to declare instead
            new_hashes: sha256 digests replacing any ``--hash`` options
        """
        self.content = content
        self.dependency_name = canonicalize_name(dependency_name)
        self.old_requirement = old_requirement
        self.new_requirement = new_requirement
        self.new_hashes = new_hashes

        # Patterns for lines that never declare a registry requirement
        self.skip_patterns = [
            r"^\s*#",  # Comment lines
            r"^\s*$",  # Empty lines
            r"^-e\s+",  # Editable installs
            r"^git\+",  # Git URLs
            r"^hg\+",  # Mercurial URLs
            r"^svn\+",  # SVN URLs
            r"^bzr\+",  # Bazaar URLs
            r"^https?://",  # Direct URLs
            r"^file://",  # File URLs
            r"^\./",  # Local paths
            r"^-r\s+",  # Include other requirements files
            r"^-c\s+",  # Constraints files
            r"^-f\s+",  # Find links
            r"^--",  # Other pip options, including hash continuations
        ]

    def _should_skip_line(self, line: str) -> bool:
        """Check if a line should be skipped during matching."""
        stripped = line.strip()
        if not stripped:
            return True

        return any(re.match(pattern, stripped) for pattern in self.skip_patterns)

    def _declares_dependency(self, line: str) -> bool:
        """Check whether a line declares the dependency at the old requirement."""
        line_for_parsing = re.split(r"\s#|^#|\s--hash|\\", line.strip())[0].strip()
        if not line_for_parsing:
            return False

        try:
            req = Requirement(line_for_parsing)
            old_specifier = SpecifierSet(self.old_requirement)
        except (InvalidRequirement, InvalidSpecifier):
            return False

        return canonicalize_name(req.name) == self.dependency_name and req.specifier == old_specifier

    def _updated_spec(self, spec: str) -> str:
        new = self.new_requirement
        if re.search(r"[=<>~!]\s+\S", spec):
            new = re.sub(r"([=<>~!]+)\s*", r"\1 ", new)
        if re.search(r",\s", spec):
            new = re.sub(r",\s*", ", ", new)
        return new

    def updated_content(self) -> str:
        """Return the content with the requirement replaced.

        The content is returned unchanged if no line declares the dependency
        at the old requirement.
        """
        lines = self.content.splitlines(keepends=True)

        for index, line in enumerate(lines):
            if self._should_skip_line(line) or not self._declares_dependency(line):
                continue

            body = line.rstrip("\r\n")
            ending = line[len(body):]
            match = LINE_REGEX.match(body)
            if match is None:
                continue

            suffix = match.group("suffix")
            if self.new_hashes is not None and suffix.lstrip().startswith("--hash"):
                continuation = " \\" if suffix.rstrip().endswith("\\") else ""
                suffix = " " + " ".join(format_hash(h) for h in self.new_hashes) + continuation

            lines[index] = match.group("prefix") + self._updated_spec(match.group("spec")) + suffix + ending

            if self.new_hashes is not None and body.rstrip().endswith("\\"):
                self._replace_hash_lines(lines, index + 1)

        return "".join(lines)

    def _replace_hash_lines(self, lines: list[str], start: int) -> None:
        end = start
        while end < len(lines) and HASH_LINE_REGEX.match(lines[end].rstrip("\r\n")):
            end += 1
        if end == start:
            return

        first = HASH_LINE_REGEX.match(lines[start].rstrip("\r\n"))
        last = lines[end - 1]
        last_body = last.rstrip("\r\n")
        ending = last[len(last_body):] or "\n"
        final_trailing = HASH_LINE_REGEX.match(last_body).group("trailing")

        replacement = []
        for position, digest in enumerate(self.new_hashes):
            is_last = position == len(self.new_hashes) - 1
            trailing = final_trailing if is_last else " \\"
            replacement.append(f"{first.group('indent')}{format_hash(digest)}{trailing}{ending}")

        lines[start:end] = replacement
