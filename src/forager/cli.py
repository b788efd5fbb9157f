"""
Forager CLI

Commands:
- serve: Serve manifests for the image directories below SOURCE
- manifest: Print the manifest for one identifier
- validate: Check a served manifest for consistency
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Any

import pydantic
import typer
import uvicorn

from forager.config import DEFAULT_BIND, DEFAULT_PATH_SEP, ForagerConfig
from forager.context import DEFAULT_CONTEXT_FILE
from forager.identifiers import Identifier, ResolveError
from forager.iiif.v2 import ManifestLoadError, load_manifest, validate_manifest
from forager.manifests import ManifestSource
from forager.web import create_app

app = typer.Typer(add_completion=False, help="Serve IIIF manifests for directories of images")


class JsonFormatter(logging.Formatter):
    """Simple JSON formatter for structured logs."""
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        # Include any custom attributes passed via `extra=`.
        reserved = {
            "name","msg","args","levelname","levelno","pathname","filename","module",
            "exc_info","exc_text","stack_info","lineno","funcName","created","msecs",
            "relativeCreated","thread","threadName","processName","process",
            "taskName",
        }
        for k, v in record.__dict__.items():
            if k in reserved or k.startswith("_"):
                continue
            try:
                json.dumps(v)
                payload[k] = v
            except TypeError:
                payload[k] = repr(v)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str) -> logging.Logger:
    logger = logging.getLogger("forager")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


LOGGER = logging.getLogger("forager")


def build_config(
    source: Path,
    image_base_url: str,
    presentation_base_url: str | None,
    bind: str,
    path_sep: str,
    context_file: str,
    sort_entries: bool,
) -> ForagerConfig:
    """Build the configuration, reporting invalid values as CLI errors."""
    try:
        return ForagerConfig(
            source=source,
            image_base_url=image_base_url,
            presentation_base_url=presentation_base_url,
            bind=bind,
            path_sep=path_sep,
            context_file=context_file,
            sort_entries=sort_entries,
        )
    except pydantic.ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise typer.BadParameter(messages) from e


SourceArg = Annotated[
    Path,
    typer.Argument(help="Directory containing the image directories", envvar="FORAGER_SOURCE"),
]
ImageApiOpt = Annotated[
    str,
    typer.Option("--image-api", "-i", help="Base URL for all IIIF Image API URLs", envvar="FORAGER_IMAGE_API"),
]
PresentationApiOpt = Annotated[
    str | None,
    typer.Option(
        "--presentation-api",
        "-p",
        help="Base URL for all IIIF Presentation API URLs (default: http://BIND)",
        envvar="FORAGER_PRESENTATION_API",
    ),
]
BindOpt = Annotated[
    str, typer.Option("--bind", "-b", help="Bind address and port", envvar="FORAGER_BIND")
]
PathSepOpt = Annotated[
    str,
    typer.Option(
        "--url-path-sep",
        "-u",
        help="Separator for paths when turning these into ids",
        envvar="FORAGER_URL_PATH_SEP",
    ),
]
ContextFileOpt = Annotated[
    str,
    typer.Option(
        "--context-file",
        help="Name of the sidecar metadata file inside item directories",
        envvar="FORAGER_CONTEXT_FILE",
    ),
]
SortOpt = Annotated[
    bool,
    typer.Option(
        "--sort/--no-sort",
        help="Order canvases by file name instead of directory listing order",
        envvar="FORAGER_SORT",
    ),
]


@app.command("serve")
def serve_cmd(
    source: SourceArg,
    image_base_url: ImageApiOpt,
    presentation_base_url: PresentationApiOpt = None,
    bind: BindOpt = DEFAULT_BIND,
    path_sep: PathSepOpt = DEFAULT_PATH_SEP,
    context_file: ContextFileOpt = DEFAULT_CONTEXT_FILE,
    sort_entries: SortOpt = False,
    log_level: str = typer.Option("INFO", "--log-level", help="Logging verbosity (DEBUG, INFO, WARNING, ERROR)"),
) -> None:
    """
    Serve manifests for the image directories below SOURCE.

    Example:
        forager serve /data/scans --image-api https://images.example.org/iiif/2
    """
    global LOGGER
    LOGGER = setup_logging(log_level)

    config = build_config(
        source, image_base_url, presentation_base_url, bind, path_sep, context_file, sort_entries
    )
    if not config.source.is_dir():
        typer.echo(f"Error: Source directory not found: {config.source}", err=True)
        raise typer.Exit(code=1)

    LOGGER.info(
        "starting",
        extra={
            "bind": config.bind,
            "source": str(config.source),
            "presentation_base_url": config.base_urls.presentation,
            "image_base_url": config.base_urls.image,
        },
    )
    web_app = create_app(ManifestSource.from_config(config))
    uvicorn.run(web_app, host=config.host, port=config.port, log_level=log_level.lower())


@app.command("manifest")
def manifest_cmd(
    identifier: Annotated[str, typer.Argument(help="Item identifier, e.g. books-section1")],
    source: SourceArg,
    image_base_url: ImageApiOpt,
    presentation_base_url: PresentationApiOpt = None,
    bind: BindOpt = DEFAULT_BIND,
    path_sep: PathSepOpt = DEFAULT_PATH_SEP,
    context_file: ContextFileOpt = DEFAULT_CONTEXT_FILE,
    sort_entries: SortOpt = False,
    indent: int = typer.Option(2, "--indent", help="JSON indentation"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging verbosity"),
) -> None:
    """
    Print the manifest for IDENTIFIER as JSON.

    Example:
        forager manifest books-section1 /data/scans --image-api https://images.example.org/iiif/2
    """
    global LOGGER
    LOGGER = setup_logging(log_level)

    config = build_config(
        source, image_base_url, presentation_base_url, bind, path_sep, context_file, sort_entries
    )
    try:
        manifest = ManifestSource.from_config(config).manifest_for(Identifier(identifier))
    except ResolveError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(json.dumps(manifest.to_json(), ensure_ascii=False, indent=indent or None))


@app.command("validate")
def validate_cmd(
    manifest_path_or_url: str = typer.Argument(..., help="Manifest JSON path or URL"),
    timeout: float = typer.Option(10.0, "--timeout", help="HTTP timeout in seconds"),
) -> None:
    """
    Check a manifest served by forager for consistency.

    Example:
        forager validate http://localhost:8989/books-section1/manifest
    """
    try:
        manifest = load_manifest(manifest_path_or_url, timeout=timeout)
    except ManifestLoadError as e:
        typer.echo(f"❌ Could not load manifest: {e}", err=True)
        raise typer.Exit(code=1)

    issues = validate_manifest(manifest)
    if issues:
        typer.echo(f"❌ Validation failed: {len(issues)} issue(s)\n")
        for i, issue in enumerate(issues, start=1):
            typer.echo(f"  {i:>3}. {issue.path}: {issue.message}")
        raise typer.Exit(code=2)

    typer.echo(f"✅ Validation passed ({len(manifest.canvases())} canvases).")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
