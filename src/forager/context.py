"""
Sidecar metadata for item directories.

An item directory may contain a YAML file (``context.yml`` by default)
with a free-text description and an ordered list of metadata entries:

    description: Letters from the estate of J. Doe
    metadata:
      - label: Title
        value: Letters
      - label: Authors
        value: [J. Doe, A. Smith]
      - label: Place
        value:
          - {value: Cologne, language: en}
          - {value: Köln, language: de}

Loading never raises. The result tells the caller whether the file was
loaded, absent, or broken, so it can decide how loudly to report it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Protocol

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from forager.iiif.v2.models import Metadata, coerce_text


DEFAULT_CONTEXT_FILE = "context.yml"


class Context(BaseModel):
    """Description and metadata supplied next to the images."""

    model_config = ConfigDict(extra="ignore")

    description: str | None = None
    metadata: list[Metadata] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _description_as_text(cls, value: Any) -> Any:
        return coerce_text(value)

    @classmethod
    def empty(cls) -> Context:
        return cls()


@dataclass(frozen=True)
class ContextResult:
    """
    Outcome of loading a sidecar file.

    Attributes:
        status: "ok", "absent" or "error"
        context: Loaded context; empty unless status is "ok"
        reason: Why loading failed (status "error" only)
    """

    status: Literal["ok", "absent", "error"]
    context: Context
    reason: str | None = None

    @classmethod
    def ok(cls, context: Context) -> ContextResult:
        return cls("ok", context)

    @classmethod
    def absent(cls) -> ContextResult:
        return cls("absent", Context.empty())

    @classmethod
    def failed(cls, reason: str) -> ContextResult:
        return cls("error", Context.empty(), reason)


class ContextLoader(Protocol):
    """Minimal interface for sidecar metadata sources."""

    def load(self, directory: Path) -> ContextResult:
        ...


@dataclass
class YamlContextLoader:
    """Reads the sidecar file from the item directory."""

    filename: str = DEFAULT_CONTEXT_FILE

    def load(self, directory: Path) -> ContextResult:
        path = directory / self.filename
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ContextResult.absent()
        except (OSError, UnicodeDecodeError) as e:
            return ContextResult.failed(f"cannot read {path}: {e}")

        try:
            data = yaml.safe_load(text)
            context = Context.model_validate(data if data is not None else {})
        except yaml.YAMLError as e:
            return ContextResult.failed(f"invalid YAML in {path}: {e}")
        except ValidationError as e:
            return ContextResult.failed(f"invalid context in {path}: {e}")
        return ContextResult.ok(context)
