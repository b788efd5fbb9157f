"""
Identifiers and their mapping onto the source directory tree.

An identifier is the opaque string taken from a request path. Nested
directories are addressed by joining path segments with a configurable
separator, so with the separator ``-`` the identifier ``books-section1``
names the directory ``<source>/books/section1``.

Image identifiers are derived by appending the separator and the file name
to the item identifier. File names are not escaped: a file name that
contains the separator yields an identifier that decodes to a different path.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


class ResolveError(Exception):
    """
    An identifier could not be resolved to a readable directory.

    Attributes:
        path: Filesystem path the identifier resolved to
        reason: Human-readable reason, completing "path <path> ..."
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"path {path} {reason}")


class PathNotFound(ResolveError):
    def __init__(self, path: Path) -> None:
        super().__init__(path, "does not exist")


class PathNotDirectory(ResolveError):
    def __init__(self, path: Path) -> None:
        super().__init__(path, "is not a directory")


class PathOutsideSource(ResolveError):
    def __init__(self, path: Path) -> None:
        super().__init__(path, "is outside the source directory")


class PathNotReadable(ResolveError):
    def __init__(self, path: Path, error: OSError) -> None:
        super().__init__(path, f"cannot be listed: {error.strerror or error}")


@dataclass(frozen=True)
class Identifier:
    """Opaque identifier of an item or image."""

    value: str

    def __str__(self) -> str:
        return self.value


def encode(parent: Identifier, separator: str, filename: str) -> Identifier:
    """
    Derive the identifier of a file inside the directory named by ``parent``.

    Example:
        >>> encode(Identifier("books-section1"), "-", "page1.jpg")
        Identifier(value='books-section1-page1.jpg')
    """
    return Identifier(f"{parent.value}{separator}{filename}")


def decode(identifier: Identifier, separator: str) -> Path:
    """
    Turn an identifier into a path relative to the source root.

    Example:
        >>> decode(Identifier("books-section1"), "-")
        PosixPath('books/section1')
    """
    return Path(identifier.value.replace(separator, os.sep))


@dataclass(frozen=True)
class IdentifierCodec:
    """
    Maps identifiers onto directories below a source root.

    Attributes:
        source: Root directory containing the item directories
        separator: Substring standing in for the path separator in identifiers
    """

    source: Path
    separator: str = "-"

    def path_for(self, identifier: Identifier) -> Path:
        return self.source / decode(identifier, self.separator)

    def child(self, parent: Identifier, filename: str) -> Identifier:
        return encode(parent, self.separator, filename)

    def resolve_directory(self, identifier: Identifier) -> Path:
        """
        Resolve an identifier to an existing directory.

        Parameters:
            identifier: Item identifier from the request

        Returns:
            Path to the item directory

        Raises:
            PathOutsideSource: If the path escapes the source root (``..``
                segments or a leading separator)
            PathNotFound: If the path does not exist
            PathNotDirectory: If the path exists but is not a directory
        """
        path = self.path_for(identifier)
        normalized = Path(os.path.normpath(path))
        if not normalized.is_relative_to(Path(os.path.normpath(self.source))):
            raise PathOutsideSource(path)
        if not path.exists():
            raise PathNotFound(path)
        if not path.is_dir():
            raise PathNotDirectory(path)
        return path
