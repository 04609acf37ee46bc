"""Exceptions raised by depbump."""


class DepbumpError(Exception):
    """Base class for all depbump errors."""


class DependencyFileNotEvaluatable(DepbumpError):
    """A placeholder references a property that cannot be found."""


class ManifestChainTooDeep(DependencyFileNotEvaluatable):
    """A parent chain grew past the configured depth limit."""


class DependencyFileNotResolvable(DepbumpError):
    """A strategy could not locate or rewrite a declaration."""


class DependencyFileNotFound(DepbumpError):
    """A requirement references a file missing from the file set."""

    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__(f"{file_name} not found in dependency files")


class UnsupportedFileSet(DepbumpError):
    """No update strategy applies to the supplied file set."""


class PackageIndexError(DepbumpError):
    """Release metadata could not be fetched from the package index."""
