"""CLI application for depbump."""

import asyncio
import difflib
import json
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from depbump.config import Settings
from depbump.context import ResolutionContext
from depbump.errors import DepbumpError
from depbump.maven.repositories import RepositoriesFinder
from depbump.models import Dependency, DependencyFile, Requirement
from depbump.registry_client import RegistryClient
from depbump.strategy import select_strategy
from depbump.updater import updated_dependency_files

console = Console()

MANIFEST_NAMES = {
    "Pipfile",
    "Pipfile.lock",
    "pyproject.toml",
    "poetry.lock",
    "pyproject.lock",
    "pom.xml",
}


def is_dependency_file(relative_path: str) -> bool:
    """Check whether a project file is one depbump knows how to update."""
    name = os.path.basename(relative_path)
    if name in MANIFEST_NAMES or name.endswith(".in"):
        return True
    return name.endswith(".txt") and "requirements" in relative_path


def collect_dependency_files(project_dir: Path) -> list[DependencyFile]:
    """Read every dependency file below a project directory."""
    files = []
    for path in sorted(project_dir.rglob("*")):
        relative = path.relative_to(project_dir).as_posix()
        if not path.is_file() or any(part.startswith(".") for part in path.relative_to(project_dir).parts):
            continue
        if is_dependency_file(relative):
            files.append(DependencyFile(name=relative, content=path.read_text()))
    return files


def _requirement(data: dict) -> Requirement:
    return Requirement(
        file=data["file"],
        requirement=data.get("requirement"),
        groups=tuple(data.get("groups") or ()),
        source=data.get("source"),
        metadata=data.get("metadata") or {},
    )


def load_dependency(path: Path) -> Dependency:
    """Load a dependency change from a JSON description."""
    data = json.loads(path.read_text())
    return Dependency(
        name=data["name"],
        version=data.get("version"),
        previous_version=data.get("previous_version"),
        package_manager=data.get("package_manager", "pip"),
        requirements=tuple(_requirement(r) for r in data.get("requirements", [])),
        previous_requirements=tuple(_requirement(r) for r in data.get("previous_requirements", [])),
    )


def load_credentials(path: Path | None) -> list[dict]:
    if path is None:
        return []
    return json.loads(path.read_text())


def format_diff_output(original: DependencyFile, updated: DependencyFile) -> str:
    """Format a unified diff between two versions of a file."""
    return "".join(
        difflib.unified_diff(
            original.content.splitlines(keepends=True),
            updated.content.splitlines(keepends=True),
            fromfile=f"a/{original.name}",
            tofile=f"b/{updated.name}",
        )
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


app = typer.Typer(
    name="depbump",
    help="depbump - Rewrite dependency files to move one dependency to a new version",
    add_completion=False,
)


@app.command()
def update(
    project_dir: Path = typer.Argument(help="Project directory holding the dependency files"),
    dependency_file: Path = typer.Option(..., "--dependency", "-d", help="JSON description of the dependency change"),
    credentials_file: Path | None = typer.Option(None, "--credentials", "-c", help="JSON list of registry credentials"),
    in_place: bool = typer.Option(False, "--in-place", "-i", help="Write updated files back to disk"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Update one dependency across a project's dependency files."""
    configure_logging(verbose)

    try:
        files = collect_dependency_files(project_dir)
        dependency = load_dependency(dependency_file)
        credentials = load_credentials(credentials_file)

        updated = asyncio.run(
            updated_dependency_files(files, dependency, credentials, settings=Settings.from_env())
        )
    except (DepbumpError, OSError, ValueError, KeyError) as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)

    if not updated:
        console.print("No changes required")
        raise typer.Exit(2)  # No changes exit code

    originals = {f.name: f for f in files}
    for file in updated:
        if in_place:
            (project_dir / file.name).write_text(file.content)
            console.print(f"Updated {file.name}")
        else:
            original = originals.get(file.name, DependencyFile(name=file.name, content=""))
            console.print(format_diff_output(original, file), markup=False, highlight=False, soft_wrap=True)


@app.command()
def strategy(
    project_dir: Path = typer.Argument(help="Project directory holding the dependency files"),
) -> None:
    """Show which update strategy applies to a project."""
    try:
        kind = select_strategy(collect_dependency_files(project_dir))
    except DepbumpError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)
    console.print(kind.value)


async def _repository_urls(
    files: list[DependencyFile], pom: DependencyFile, credentials: list[dict], exclude_inherited: bool
) -> list[str]:
    settings = Settings.from_env()
    async with RegistryClient(settings) as registry:
        context = ResolutionContext(client=registry, settings=settings)
        finder = RepositoriesFinder(files, context, credentials=credentials)
        return await finder.repository_urls(pom, exclude_inherited=exclude_inherited)


@app.command()
def origins(
    project_dir: Path = typer.Argument(help="Project directory holding the POM files"),
    pom_name: str = typer.Option("pom.xml", "--pom", help="POM to collect repositories for, relative to the project"),
    credentials_file: Path | None = typer.Option(None, "--credentials", "-c", help="JSON list of registry credentials"),
    exclude_inherited: bool = typer.Option(False, "--exclude-inherited", help="Ignore repositories from parent POMs"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """List the repositories a POM resolves artifacts from, in priority order."""
    configure_logging(verbose)

    try:
        files = collect_dependency_files(project_dir)
        pom = next((f for f in files if f.name == pom_name), None)
        if pom is None:
            console.print(f"Error: {pom_name} not found in {project_dir}", style="red")
            raise typer.Exit(1)
        urls = asyncio.run(_repository_urls(files, pom, load_credentials(credentials_file), exclude_inherited))
    except (DepbumpError, OSError, ValueError) as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)

    for url in urls:
        console.print(url, markup=False, highlight=False, soft_wrap=True)


if __name__ == "__main__":
    app()
