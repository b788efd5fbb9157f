"""
Manifest assembly for a single item directory.

``ManifestSource.manifest_for`` is the one operation the web layer and the
CLI call. It resolves the identifier to a directory, loads the sidecar
metadata, scans the directory for images and builds the manifest graph.
Only resolution failures are raised; unreadable entries, non-image files
and broken sidecar files are logged and left out.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from forager.config import ForagerConfig
from forager.context import Context, ContextLoader, YamlContextLoader
from forager.identifiers import Identifier, IdentifierCodec, PathNotReadable
from forager.iiif.v2.models import LOCATION_LABEL, BaseUrls, Manifest, Metadata, Sequence
from forager.imaging import ImageClassifier, ImageInfo, PillowClassifier


LOGGER = logging.getLogger("forager.manifests")


@dataclass
class ManifestSource:
    """
    Builds manifests for directories below a source root.

    Attributes:
        codec: Maps identifiers to directories
        base_urls: Base URLs for derived URIs
        classifier: Decides which files are images
        context_loader: Supplies sidecar description and metadata
        sort_entries: Order canvases by file name instead of listing order
    """

    codec: IdentifierCodec
    base_urls: BaseUrls
    classifier: ImageClassifier = field(default_factory=PillowClassifier)
    context_loader: ContextLoader = field(default_factory=YamlContextLoader)
    sort_entries: bool = False

    @classmethod
    def from_config(cls, config: ForagerConfig) -> ManifestSource:
        return cls(
            codec=IdentifierCodec(config.source, config.path_sep),
            base_urls=config.base_urls,
            context_loader=YamlContextLoader(config.context_file),
            sort_entries=config.sort_entries,
        )

    def manifest_for(self, item_id: Identifier) -> Manifest:
        """
        Build the manifest for an item.

        Parameters:
            item_id: Item identifier taken from the request path

        Returns:
            Manifest with exactly one sequence

        Raises:
            ResolveError: If the identifier does not name a directory
                below the source root
        """
        source_path = self.codec.resolve_directory(item_id)
        context = self.load_context(source_path)

        sequence = Sequence.new(self.base_urls, item_id)
        for file_name, info in self.scan(source_path):
            sequence.add_image(
                self.base_urls,
                item_id,
                self.codec.child(item_id, file_name),
                file_name,
                info.format,
                info.width,
                info.height,
            )

        metadata = [
            *context.metadata,
            Metadata.key_value(LOCATION_LABEL, item_id.value),
        ]
        description = context.description if context.description is not None else item_id.value

        manifest = Manifest.new(
            self.base_urls,
            item_id,
            item_id.value,
            metadata,
            description,
        )
        manifest.add_sequence(sequence)

        LOGGER.debug(
            "manifest_built",
            extra={"identifier": item_id.value, "canvases": len(sequence.canvases)},
        )
        return manifest

    def load_context(self, directory: Path) -> Context:
        """Load sidecar metadata, falling back to an empty context."""
        result = self.context_loader.load(directory)
        if result.status == "absent":
            LOGGER.debug("context_absent", extra={"path": str(directory)})
        elif result.status == "error":
            LOGGER.warning(
                "context_unloadable",
                extra={"path": str(directory), "error": result.reason},
            )
        return result.context

    def scan(self, directory: Path) -> Iterator[tuple[str, ImageInfo]]:
        """
        Yield ``(file_name, image_info)`` for every image in a directory.

        Entries are yielded in listing order, or by file name when
        ``sort_entries`` is set. Subdirectories, files that are not images
        and names that cannot be encoded as UTF-8 are skipped silently;
        entries that cannot be read are logged and skipped.

        Raises:
            PathNotReadable: If the directory itself cannot be listed
        """
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            raise PathNotReadable(directory, e) from e
        if self.sort_entries:
            entries.sort(key=lambda e: e.name)

        for entry in entries:
            if not _is_text(entry.name):
                continue
            try:
                if not entry.is_file():
                    continue
                info = self.classifier.classify(Path(entry.path))
            except OSError as e:
                LOGGER.warning(
                    "entry_unreadable",
                    extra={"path": entry.path, "error": str(e)},
                )
                continue
            if info is None:
                continue
            yield entry.name, info


def _is_text(name: str) -> bool:
    # os.fsdecode maps undecodable bytes to lone surrogates
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
