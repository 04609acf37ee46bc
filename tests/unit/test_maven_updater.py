"""Tests for POM version updates."""

import httpx
import pytest

from depbump.errors import DependencyFileNotEvaluatable, DependencyFileNotResolvable
from depbump.maven.updater import MavenFileUpdater
from depbump.models import Dependency, DependencyFile, Requirement
from depbump.updater import updated_dependency_files

CENTRAL = "https://repo.maven.apache.org/maven2"


def maven_dependency(name, old, new, file="pom.xml"):
    return Dependency(
        name=name,
        version=new,
        previous_version=old,
        package_manager="maven",
        requirements=(Requirement(file=file, requirement=new),),
        previous_requirements=(Requirement(file=file, requirement=old),),
    )


async def update(registry, files, dependency):
    return await MavenFileUpdater(files, dependency, [], registry.context()).updated_dependency_files()


class TestMavenFileUpdater:
    """Test rewriting POM declarations."""

    @pytest.mark.asyncio
    async def test_literal_version(self, registry, make_pom):
        """Should rewrite the version of the matching declaration only."""
        pom = DependencyFile(
            name="pom.xml",
            content=make_pom(dependencies=[
                ("org.springframework", "spring-core", "5.0.0"),
                ("junit", "junit", "5.0.0"),
            ]),
        )

        updated = await update(registry, [pom], maven_dependency("junit:junit", "5.0.0", "5.1.0"))

        assert len(updated) == 1
        content = updated[0].content
        assert "<artifactId>spring-core</artifactId>\n      <version>5.0.0</version>" in content
        assert "<artifactId>junit</artifactId>\n      <version>5.1.0</version>" in content

    @pytest.mark.asyncio
    async def test_property_version(self, registry, make_pom):
        """Should rewrite the property a declaration references."""
        pom = DependencyFile(
            name="pom.xml",
            content=make_pom(
                properties={"spring.version": "5.0.0"},
                dependencies=[("org.springframework", "spring-core", "${spring.version}")],
            ),
        )

        updated = await update(
            registry, [pom], maven_dependency("org.springframework:spring-core", "5.0.0", "5.1.0")
        )

        assert "<spring.version>5.1.0</spring.version>" in updated[0].content
        assert "<version>${spring.version}</version>" in updated[0].content

    @pytest.mark.asyncio
    async def test_property_in_local_parent(self, registry, make_pom):
        """Should rewrite the parent POM declaring the property."""
        child = DependencyFile(
            name="app/pom.xml",
            content=make_pom(
                parent=("com.example", "parent", "1.0.0"),
                dependencies=[("org.springframework", "spring-core", "${spring.version}")],
            ),
        )
        parent = DependencyFile(
            name="pom.xml",
            content=make_pom(artifact_id="parent", properties={"spring.version": "5.0.0"}),
        )

        updated = await update(
            registry,
            [parent, child],
            maven_dependency("org.springframework:spring-core", "5.0.0", "5.1.0", file="app/pom.xml"),
        )

        assert [f.name for f in updated] == ["pom.xml"]
        assert "<spring.version>5.1.0</spring.version>" in updated[0].content

    @pytest.mark.asyncio
    async def test_property_in_remote_parent(self, registry, make_pom):
        """Should refuse to update a property only a remote parent declares."""
        registry.routes[f"{CENTRAL}/org/acme/base/2.0/base-2.0.pom"] = httpx.Response(
            200,
            text=make_pom(group_id="org.acme", artifact_id="base", version="2.0",
                          properties={"spring.version": "5.0.0"}),
        )
        pom = DependencyFile(
            name="pom.xml",
            content=make_pom(
                parent=("org.acme", "base", "2.0"),
                dependencies=[("org.springframework", "spring-core", "${spring.version}")],
            ),
        )

        with pytest.raises(DependencyFileNotResolvable, match="remote parent"):
            await update(registry, [pom], maven_dependency("org.springframework:spring-core", "5.0.0", "5.1.0"))

    @pytest.mark.asyncio
    async def test_unknown_property(self, registry, make_pom):
        """Should raise when the referenced property is not declared anywhere."""
        pom = DependencyFile(
            name="pom.xml",
            content=make_pom(dependencies=[("org.springframework", "spring-core", "${spring.version}")]),
        )

        with pytest.raises(DependencyFileNotEvaluatable):
            await update(registry, [pom], maven_dependency("org.springframework:spring-core", "5.0.0", "5.1.0"))

    @pytest.mark.asyncio
    async def test_declaration_not_found(self, registry, make_pom):
        """Should raise when no declaration carries the old version."""
        pom = DependencyFile(name="pom.xml", content=make_pom(dependencies=[("junit", "junit", "4.12")]))

        with pytest.raises(DependencyFileNotResolvable):
            await update(registry, [pom], maven_dependency("junit:junit", "5.0.0", "5.1.0"))

    @pytest.mark.asyncio
    async def test_plugin_default_group(self, registry):
        """Should match plugins declared without a group id."""
        content = """<project>
  <artifactId>app</artifactId>
  <build>
    <plugins>
      <plugin>
        <artifactId>maven-compiler-plugin</artifactId>
        <version>3.7.0</version>
        <dependencies>
          <dependency>
            <groupId>org.ow2.asm</groupId>
            <artifactId>asm</artifactId>
            <version>3.7.0</version>
          </dependency>
        </dependencies>
      </plugin>
    </plugins>
  </build>
</project>
"""
        pom = DependencyFile(name="pom.xml", content=content)

        updated = await update(
            registry, [pom], maven_dependency("org.apache.maven.plugins:maven-compiler-plugin", "3.7.0", "3.8.0")
        )

        assert "<artifactId>maven-compiler-plugin</artifactId>\n        <version>3.8.0</version>" in updated[0].content
        assert "<artifactId>asm</artifactId>\n            <version>3.7.0</version>" in updated[0].content

    @pytest.mark.asyncio
    async def test_already_updated(self, registry, make_pom):
        """Should return nothing when the declaration already has the new version."""
        pom = DependencyFile(name="pom.xml", content=make_pom(dependencies=[("junit", "junit", "5.1.0")]))

        assert await update(registry, [pom], maven_dependency("junit:junit", "5.0.0", "5.1.0")) == []

    @pytest.mark.asyncio
    async def test_property_and_literal_in_one_pom(self, registry):
        """Should keep the property rewrite when a literal declaration is also rewritten."""
        content = """<project>
  <groupId>com.example</groupId>
  <artifactId>app</artifactId>
  <properties>
    <guava.version>1.0</guava.version>
  </properties>
  <dependencies>
    <dependency>
      <groupId>com.google.guava</groupId>
      <artifactId>guava</artifactId>
      <version>${guava.version}</version>
    </dependency>
    <dependency>
      <groupId>com.google.guava</groupId>
      <artifactId>guava</artifactId>
      <classifier>tests</classifier>
      <version>1.0</version>
    </dependency>
  </dependencies>
</project>
"""
        pom = DependencyFile(name="pom.xml", content=content)

        updated = await updated_dependency_files(
            [pom], maven_dependency("com.google.guava:guava", "1.0", "2.0"), client=registry.client()
        )

        assert len(updated) == 1
        assert "<guava.version>2.0</guava.version>" in updated[0].content
        assert "<classifier>tests</classifier>\n      <version>2.0</version>" in updated[0].content
        assert "<version>${guava.version}</version>" in updated[0].content
