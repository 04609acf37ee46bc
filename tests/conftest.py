"""Pytest configuration and fixtures."""

import httpx
import pytest

from depbump.config import Settings
from depbump.context import ResolutionContext
from depbump.registry_client import RegistryClient


class FakeRegistry:
    """Serves canned responses by exact URL and records every request."""

    def __init__(self):
        self.routes: dict[str, httpx.Response | Exception] = {}
        self.requested: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        outcome = self.routes.get(url)
        if outcome is None:
            return httpx.Response(404)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def context(self, settings: Settings | None = None) -> ResolutionContext:
        settings = settings or Settings()
        return ResolutionContext(
            client=RegistryClient(settings, client=self.client()),
            settings=settings,
        )


@pytest.fixture
def registry():
    """A fake registry; add routes before resolving."""
    return FakeRegistry()


def build_pom(
    group_id: str | None = "com.example",
    artifact_id: str | None = "app",
    version: str | None = "1.0.0",
    parent: tuple | None = None,
    repositories: list[tuple[str, str]] | None = None,
    properties: dict[str, str] | None = None,
    dependencies: list[tuple[str, str, str]] | None = None,
) -> str:
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<project xmlns="http://maven.apache.org/POM/4.0.0">',
        "  <modelVersion>4.0.0</modelVersion>",
    ]
    if parent:
        lines.append("  <parent>")
        for tag, value in zip(("groupId", "artifactId", "version"), parent):
            if value is not None:
                lines.append(f"    <{tag}>{value}</{tag}>")
        lines.append("  </parent>")
    for tag, value in (("groupId", group_id), ("artifactId", artifact_id), ("version", version)):
        if value is not None:
            lines.append(f"  <{tag}>{value}</{tag}>")
    if properties:
        lines.append("  <properties>")
        lines.extend(f"    <{name}>{value}</{name}>" for name, value in properties.items())
        lines.append("  </properties>")
    if repositories:
        lines.append("  <repositories>")
        for repo_id, url in repositories:
            lines.append("    <repository>")
            if repo_id is not None:
                lines.append(f"      <id>{repo_id}</id>")
            lines.append(f"      <url>{url}</url>")
            lines.append("    </repository>")
        lines.append("  </repositories>")
    if dependencies:
        lines.append("  <dependencies>")
        for dep_group, dep_artifact, dep_version in dependencies:
            lines.extend([
                "    <dependency>",
                f"      <groupId>{dep_group}</groupId>",
                f"      <artifactId>{dep_artifact}</artifactId>",
                f"      <version>{dep_version}</version>",
                "    </dependency>",
            ])
        lines.append("  </dependencies>")
    lines.append("</project>")
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_pom():
    """Build POM content from coordinates, repositories and properties."""
    return build_pom


@pytest.fixture
def pypi_release():
    """Build a package index JSON response for one release."""

    def _release(*files: tuple[str, str]) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "info": {},
                "urls": [
                    {"filename": filename, "digests": {"sha256": digest}}
                    for filename, digest in files
                ],
            },
        )

    return _release
