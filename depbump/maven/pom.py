"""Helpers for reading Maven POM files."""

import re
import xml.etree.ElementTree as ET

PROPERTY_REGEX = re.compile(r"\$\{(?P<property>[a-zA-Z0-9.\-_]+)\}")

# In theory we should check the artifact type and either look in
# <repositories> or <pluginRepositories>. In practice it's unlikely anyone
# makes this distinction.
REPOSITORY_NODES = {
    ("repositories", "repository"),
    ("pluginRepositories", "pluginRepository"),
}


def parse_pom(content: str) -> ET.Element | None:
    """Parse POM content, dropping XML namespaces.

    Returns:
        The root element, or None if the content is not well-formed XML
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError:
        return None

    for element in root.iter():
        if isinstance(element.tag, str) and "}" in element.tag:
            element.tag = element.tag.split("}", 1)[1]
    return root


def text_at(element: ET.Element, path: str) -> str | None:
    """Stripped text of the node at ``path``, or None if absent."""
    node = element.find(path)
    if node is None:
        return None
    return (node.text or "").strip()


def is_pom(content: str) -> bool:
    """Check the content is a POM with a top-level artifactId."""
    root = parse_pom(content)
    return root is not None and root.tag == "project" and root.find("artifactId") is not None


def pom_name(root: ET.Element) -> str | None:
    """The ``groupId:artifactId`` a POM publishes, if it declares one."""
    group_id = text_at(root, "groupId") or text_at(root, "parent/groupId")
    artifact_id = text_at(root, "artifactId")
    if not group_id or not artifact_id:
        return None
    return f"{group_id}:{artifact_id}"


def contains_property(value: str) -> bool:
    return PROPERTY_REGEX.search(value) is not None


def repository_nodes(root: ET.Element) -> list[ET.Element]:
    """Repository declarations anywhere in the POM, in document order."""
    return [
        node
        for element in root.iter()
        for node in element
        if (element.tag, node.tag) in REPOSITORY_NODES
    ]


def child_path(root: ET.Element, segments: list[str]) -> ET.Element | None:
    """Follow direct children by tag name; dotted property names need this."""
    node = root
    for segment in segments:
        node = next((child for child in node if child.tag == segment), None)
        if node is None:
            return None
    return node
