"""
Consistency checks for manifests served by forager.

A served manifest is derived from one item identifier. Its sequence,
canvas and annotation URIs follow fixed templates below the manifest's
item prefix (the manifest id without ``/manifest``), every image carries
an Image API service, and the ``location`` entry closes the metadata.
An item directory without images yields a valid manifest with an empty
sequence.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import DEFAULT_SEQUENCE, LOCATION_LABEL, Canvas, Manifest, Metadata


MANIFEST_SUFFIX = "/manifest"


@dataclass(frozen=True)
class ValidationIssue:
    """
    Represents a validation problem.

    Attributes:
        path: JSON path to the problematic field (e.g., "sequences[0].canvases[2].@id")
        message: Human-readable description of the issue
    """

    path: str
    message: str


def item_prefix(manifest: Manifest) -> str | None:
    """Presentation URI prefix shared by all documents of the item."""
    manifest_id = str(manifest.id)
    if not manifest_id.endswith(MANIFEST_SUFFIX):
        return None
    return manifest_id[: -len(MANIFEST_SUFFIX)]


def validate_manifest(manifest: Manifest) -> list[ValidationIssue]:
    """
    Validate a manifest.

    Checks that:
    - the manifest id ends in ``/manifest``
    - there is a sequence, with id ``{prefix}/sequence/normal``
    - canvas ids are ``{prefix}/canvas/{position}``
    - each canvas passes :func:`validate_canvas`
    - the last metadata entry is ``location`` and names the manifest label

    Returns:
        List of validation issues (empty if valid)
    """
    issues: list[ValidationIssue] = []

    prefix = item_prefix(manifest)
    if prefix is None:
        issues.append(ValidationIssue("@id", f"Manifest id does not end in {MANIFEST_SUFFIX}."))

    if not manifest.sequences:
        issues.append(ValidationIssue("sequences", "Missing or empty sequences[]."))
    for seq_i, seq in enumerate(manifest.sequences):
        seq_path = f"sequences[{seq_i}]"
        if prefix is not None:
            expected = f"{prefix}/sequence/{DEFAULT_SEQUENCE}"
            if seq.id is None or str(seq.id) != expected:
                issues.append(ValidationIssue(f"{seq_path}.@id", f"Expected {expected}."))

        for c_i, canvas in enumerate(seq.canvases):
            canvas_path = f"{seq_path}.canvases[{c_i}]"
            if prefix is not None:
                expected = f"{prefix}/canvas/{c_i}"
                if str(canvas.id) != expected:
                    issues.append(ValidationIssue(f"{canvas_path}.@id", f"Expected {expected}."))
            for issue in validate_canvas(canvas):
                issues.append(ValidationIssue(f"{canvas_path}.{issue.path}", issue.message))

    issues.extend(validate_location(manifest))
    return issues


def validate_canvas(canvas: Canvas) -> list[ValidationIssue]:
    """
    Validate single canvas.

    Every image annotation must paint onto this canvas, carry an Image API
    service and match the canvas dimensions. Paths in the returned issues
    are relative to the canvas.
    """
    issues: list[ValidationIssue] = []

    if not canvas.images:
        issues.append(ValidationIssue("images", "Canvas missing images[]."))
        return issues

    for a_i, anno in enumerate(canvas.images):
        path = f"images[{a_i}]"
        if anno.motivation != "sc:painting":
            issues.append(ValidationIssue(f"{path}.motivation", "Expected sc:painting."))
        if anno.on is None or str(anno.on) != str(canvas.id):
            issues.append(ValidationIssue(f"{path}.on", "Annotation does not target its canvas."))

        resource = anno.resource
        if resource.first_service() is None:
            issues.append(
                ValidationIssue(
                    f"{path}.resource.service",
                    "Image resource missing service (IIIF Image API).",
                )
            )
        if (resource.width, resource.height) != (canvas.width, canvas.height):
            issues.append(
                ValidationIssue(
                    f"{path}.resource",
                    f"Image is {resource.width}x{resource.height}, "
                    f"canvas is {canvas.width}x{canvas.height}.",
                )
            )

    return issues


def validate_location(manifest: Manifest) -> list[ValidationIssue]:
    """Check that the metadata ends with the item's ``location`` entry."""
    metadata: list[Metadata] = manifest.metadata or []
    if not metadata or metadata[-1].label != LOCATION_LABEL:
        return [ValidationIssue("metadata", f"Last entry is not {LOCATION_LABEL}.")]

    last = len(metadata) - 1
    if metadata[last].value != manifest.label:
        return [
            ValidationIssue(
                f"metadata[{last}].value",
                f"{LOCATION_LABEL} does not match the manifest label.",
            )
        ]
    return []
