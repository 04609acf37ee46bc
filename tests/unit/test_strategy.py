"""Tests for update strategy selection."""

import pytest

from depbump.errors import UnsupportedFileSet
from depbump.models import DependencyFile
from depbump.strategy import STRATEGIES, StrategyKind, select_strategy


def files(*names):
    return [DependencyFile(name=name, content="") for name in names]


class TestStrategySelection:
    """Test strategy selection from file names."""

    def test_requirements_only(self):
        """Should fall back to flat requirements."""
        assert select_strategy(files("requirements.txt")) == StrategyKind.REQUIREMENTS

    def test_pom_selects_maven(self):
        """Should select Maven when any POM is present."""
        assert select_strategy(files("pom.xml")) == StrategyKind.MAVEN
        assert select_strategy(files("module/pom.xml", "requirements.txt")) == StrategyKind.MAVEN

    def test_pipfile_with_lockfile(self):
        """Should prefer the Pipfile lock over requirement files."""
        assert select_strategy(files("Pipfile", "Pipfile.lock", "requirements.txt")) == StrategyKind.PIPFILE

    def test_pipfile_without_lockfile(self):
        """Should treat a Pipfile without lock as a flat manifest."""
        assert select_strategy(files("Pipfile", "requirements.txt")) == StrategyKind.REQUIREMENTS

    def test_poetry_lockfiles(self):
        """Should select Poetry for either lockfile name."""
        assert select_strategy(files("pyproject.toml", "poetry.lock")) == StrategyKind.POETRY
        assert select_strategy(files("pyproject.toml", "pyproject.lock")) == StrategyKind.POETRY

    def test_pyproject_without_lockfile(self):
        """Should treat a lock-less pyproject.toml as a flat manifest."""
        assert select_strategy(files("pyproject.toml")) == StrategyKind.REQUIREMENTS

    def test_compiled_pair(self):
        """Should select pip-compile when a .in has a matching .txt."""
        assert select_strategy(files("requirements/test.in", "requirements/test.txt")) == StrategyKind.PIP_COMPILE

    def test_compiled_pair_with_flat_requirements(self):
        """Should keep pip-compile when an unrelated requirements file is present."""
        assert select_strategy(
            files("requirements.txt", "requirements/test.in", "requirements/test.txt")
        ) == StrategyKind.PIP_COMPILE

    def test_unmatched_in_file(self):
        """Should not select pip-compile for a .in without its output."""
        assert select_strategy(files("requirements/test.in", "requirements.txt")) == StrategyKind.REQUIREMENTS
        assert select_strategy(files("test.in", "requirements/test.txt")) == StrategyKind.REQUIREMENTS

    def test_lockfile_must_share_directory(self):
        """Should pair manifests and lockfiles only within one directory."""
        assert select_strategy(files("backend/Pipfile", "backend/Pipfile.lock")) == StrategyKind.PIPFILE
        assert select_strategy(files("backend/Pipfile", "Pipfile.lock")) == StrategyKind.REQUIREMENTS

    def test_selection_order(self):
        """Should apply the first matching rule."""
        assert select_strategy(
            files("Pipfile", "Pipfile.lock", "pyproject.toml", "poetry.lock")
        ) == StrategyKind.PIPFILE
        assert select_strategy(
            files("pyproject.toml", "poetry.lock", "test.in", "test.txt")
        ) == StrategyKind.POETRY

    def test_empty_file_set(self):
        """Should reject an empty file set."""
        with pytest.raises(UnsupportedFileSet):
            select_strategy([])

    def test_every_kind_has_a_strategy(self):
        """Should map every strategy kind to an updater."""
        assert set(STRATEGIES) == set(StrategyKind)
