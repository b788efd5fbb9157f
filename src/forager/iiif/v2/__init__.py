"""
IIIF Presentation 2.1 models and utilities.

This module provides the Pydantic models forager builds manifests from,
along with a loader and consistency checks for reading served manifests
back.

Building a manifest:
    >>> from forager.identifiers import Identifier
    >>> from forager.iiif.v2 import BaseUrls, Manifest, Sequence, ImageFormat
    >>>
    >>> urls = BaseUrls(presentation="http://localhost:8989", image="http://images")
    >>> item = Identifier("books-section1")
    >>> sequence = Sequence.new(urls, item)
    >>> canvas = sequence.add_image(
    ...     urls, item, Identifier("books-section1-page1.jpg"), "page1.jpg",
    ...     ImageFormat.JPEG, 800, 1200,
    ... )
    >>> manifest = Manifest.new(urls, item, item.value, [], None)
    >>> manifest.add_sequence(sequence)

Checking a served manifest:
    >>> from forager.iiif.v2 import load_manifest, validate_manifest
    >>>
    >>> manifest = load_manifest("http://localhost:8989/books-section1/manifest")
    >>> issues = validate_manifest(manifest)
"""

from .models import (
    Manifest,
    Canvas,
    Sequence,
    Annotation,
    ImageResource,
    ImageService,
    ImageFormat,
    Metadata,
    LocalizedValue,
    BaseUrls,
    Uri,
)
from .loaders import (
    ManifestLoadError,
    load_manifest,
    read_document,
)
from .validation import (
    ValidationIssue,
    validate_manifest,
    validate_canvas,
    validate_location,
)

__all__ = [
    # Models
    "Manifest",
    "Canvas",
    "Sequence",
    "Annotation",
    "ImageResource",
    "ImageService",
    "ImageFormat",
    "Metadata",
    "LocalizedValue",
    "BaseUrls",
    "Uri",
    # Loaders
    "ManifestLoadError",
    "load_manifest",
    "read_document",
    # Validation
    "ValidationIssue",
    "validate_manifest",
    "validate_canvas",
    "validate_location",
]
