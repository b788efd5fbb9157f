"""
Runtime configuration.

A single immutable ``ForagerConfig`` is built once at startup (by the CLI)
and handed to the manifest source and the web application.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from forager.context import DEFAULT_CONTEXT_FILE
from forager.iiif.v2.models import BaseUrls


DEFAULT_BIND = "localhost:8989"
DEFAULT_PATH_SEP = "-"


class ForagerConfig(BaseModel):
    """
    Settings shared by every request.

    Attributes:
        source: Directory containing the image directories
        image_base_url: Base URL for all IIIF Image API URLs
        presentation_base_url: Base URL for all IIIF Presentation API URLs;
            defaults to ``http://{bind}``
        bind: Address and port the server listens on (``host:port``)
        path_sep: Separator standing in for ``/`` in identifiers
        context_file: Name of the sidecar metadata file in item directories
        sort_entries: Order canvases by file name instead of listing order
    """

    model_config = ConfigDict(frozen=True)

    source: Path
    image_base_url: str
    presentation_base_url: str | None = None
    bind: str = DEFAULT_BIND
    path_sep: str = DEFAULT_PATH_SEP
    context_file: str = DEFAULT_CONTEXT_FILE
    sort_entries: bool = False

    @field_validator("source")
    @classmethod
    def _absolute_source(cls, value: Path) -> Path:
        return value.expanduser().absolute()

    @field_validator("path_sep")
    @classmethod
    def _non_empty_separator(cls, value: str) -> str:
        if not value:
            raise ValueError("path separator must not be empty")
        return value

    @field_validator("bind")
    @classmethod
    def _host_and_port(cls, value: str) -> str:
        host, _, port = value.rpartition(":")
        if not host or not port.isdigit():
            raise ValueError(f"bind address must be host:port, got {value!r}")
        return value

    @property
    def host(self) -> str:
        return self.bind.rpartition(":")[0]

    @property
    def port(self) -> int:
        return int(self.bind.rpartition(":")[2])

    @property
    def base_urls(self) -> BaseUrls:
        presentation = self.presentation_base_url or f"http://{self.bind}"
        return BaseUrls(presentation=presentation, image=self.image_base_url)
