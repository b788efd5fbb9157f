"""
Reading manifests back from a file or a running server.

Used by ``forager validate`` to check what ``forager serve`` or
``forager manifest`` produced. Every failure is reported as a
:class:`ManifestLoadError` so callers handle one exception type.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from .models import PRESENTATION_CONTEXT, Manifest


ACCEPT = f'application/ld+json;profile="{PRESENTATION_CONTEXT}", application/json;q=0.9'


class ManifestLoadError(Exception):
    """A manifest could not be read or is not a IIIF v2 manifest."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"cannot load {source}: {reason}")


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def read_document(source: str, *, timeout: float = 10.0) -> Any:
    """
    Read and decode the JSON document at ``source``.

    URLs are requested with a IIIF Presentation 2 ``Accept`` header,
    anything else is read as a UTF-8 file.

    Raises:
        ManifestLoadError: If the document cannot be read or is not JSON
    """
    if is_url(source):
        try:
            resp = httpx.get(
                source,
                headers={"Accept": ACCEPT},
                timeout=timeout,
                follow_redirects=True,
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise ManifestLoadError(source, str(e)) from e
        text = resp.text
    else:
        try:
            text = Path(source).expanduser().read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestLoadError(source, str(e)) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestLoadError(source, f"invalid JSON: {e}") from e


def load_manifest(source: str, *, timeout: float = 10.0) -> Manifest:
    """
    Load the manifest at a file path or URL.

    Example:
        >>> manifest = load_manifest("http://localhost:8989/books-section1/manifest")
        >>> len(manifest.canvases())
        2
    """
    data = read_document(source, timeout=timeout)
    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestLoadError(
            source, f"not a IIIF v2 manifest ({e.error_count()} error(s)): {e}"
        ) from e
