"""
Pydantic models for IIIF Presentation API 2.1.

These models are the document graph served for an image directory. Every
model has a ``new`` constructor that derives its URIs from a :class:`BaseUrls`
value and the item identifier, so a graph is a pure function of its inputs.
The same models parse manifests back from JSON for the loaders and
validators, which is why most leaf fields are optional.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, RootModel, field_validator

from forager.identifiers import Identifier


PRESENTATION_CONTEXT = "http://iiif.io/api/presentation/2/context.json"
IMAGE_CONTEXT = "http://iiif.io/api/image/2/context.json"
IMAGE_PROFILE = "http://iiif.io/api/image/2/level2.json"
IMAGE_PROTOCOL = "http://iiif.io/api/image"

DEFAULT_SEQUENCE = "normal"

# Label of the metadata entry naming the item, always appended last
LOCATION_LABEL = "location"


def coerce_text(value: Any) -> Any:
    """
    Turn a scalar into its text form.

    YAML reads ``1920``, ``true`` or ``1920-05-01`` as numbers, booleans and
    dates; metadata treats them as text. Other values pass through.
    """
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float, date)):
        return str(value)
    if isinstance(value, list):
        return [coerce_text(v) for v in value]
    return value


class Uri(RootModel[str]):
    """
    Absolute URI used for every link in a document.

    Serializes as a bare JSON string.
    """

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.root

    @classmethod
    def join(cls, base: str, *segments: str | int) -> Uri:
        """
        Join a base URL and path segments with ``/``.

        Example:
            >>> str(Uri.join("https://example.org/iiif", "book", "canvas", 0))
            'https://example.org/iiif/book/canvas/0'
        """
        return cls("/".join([base, *(str(s) for s in segments)]))


class BaseUrls(BaseModel):
    """Base URLs of the Presentation API and the Image API."""

    model_config = ConfigDict(frozen=True)

    presentation: str
    image: str

    @field_validator("presentation", "image")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ImageFormat(str, Enum):
    """Image formats recognized by the classifier."""

    JPEG = "jpeg"
    PNG = "png"
    UNKNOWN = "unknown"

    @property
    def extension(self) -> str:
        return {ImageFormat.JPEG: "jpg", ImageFormat.PNG: "png"}.get(self, "")

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"


class LocalizedValue(BaseModel):
    """A metadata value tagged with a language."""

    model_config = ConfigDict(populate_by_name=True)

    value: str = Field(validation_alias=AliasChoices("value", "@value"))
    language: str = Field(validation_alias=AliasChoices("language", "@language"))

    @field_validator("value", mode="before")
    @classmethod
    def _value_as_text(cls, value: Any) -> Any:
        return coerce_text(value)


MetadataValue = Union[str, list[str], list[LocalizedValue]]


class Metadata(BaseModel):
    """
    Label/value pair shown in a manifest's metadata block.

    Labels and values are plain strings or lists of language-tagged values.
    """

    label: Union[str, list[LocalizedValue]]
    value: MetadataValue

    @field_validator("label", "value", mode="before")
    @classmethod
    def _scalars_as_text(cls, value: Any) -> Any:
        return coerce_text(value)

    @classmethod
    def key_value(cls, label: str, value: str) -> Metadata:
        return cls(label=label, value=value)


class ImageService(BaseModel):
    """
    IIIF Image API service descriptor.

    The service id is keyed by the item identifier, so all images of one
    item share the same service URI.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    context: Uri | None = Field(
        default=None, validation_alias=AliasChoices("context", "@context")
    )
    id: Uri = Field(validation_alias=AliasChoices("id", "@id"))
    profile: Uri | list[Any] | None = None
    protocol: Uri | None = None

    @classmethod
    def new(cls, base_urls: BaseUrls, item_id: Identifier) -> ImageService:
        return cls(
            context=Uri(IMAGE_CONTEXT),
            id=Uri.join(base_urls.image, item_id.value),
            profile=Uri(IMAGE_PROFILE),
            protocol=Uri(IMAGE_PROTOCOL),
        )


class ImageResource(BaseModel):
    """
    Image resource in an annotation.

    The asset URI requests the full image from the Image API, addressed by
    item identifier and image identifier.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Uri | None = Field(default=None, validation_alias=AliasChoices("id", "@id"))
    type: str | None = Field(
        default=None, validation_alias=AliasChoices("type", "@type")
    )
    format: str | None = None
    service: ImageService | list[ImageService] | None = None
    width: int | None = None
    height: int | None = None

    @classmethod
    def new(
        cls,
        base_urls: BaseUrls,
        item_id: Identifier,
        image_id: Identifier,
        image_format: ImageFormat,
        width: int,
        height: int,
    ) -> ImageResource:
        return cls(
            id=Uri.join(
                base_urls.image,
                item_id.value,
                image_id.value,
                "full",
                "full",
                f"default.{image_format.extension}",
            ),
            type="dctypes:Image",
            format=image_format.mime_type,
            service=ImageService.new(base_urls, item_id),
            width=width,
            height=height,
        )

    def first_service(self) -> ImageService | None:
        """
        Get first image service.

        Returns:
            First ImageService if available, None otherwise
        """
        if self.service is None:
            return None
        if isinstance(self.service, ImageService):
            return self.service
        if isinstance(self.service, list) and len(self.service) > 0:
            return self.service[0]
        return None


# The only resource kind painted onto canvases.
Resource = ImageResource


class Annotation(BaseModel):
    """Painting annotation binding an image resource to its canvas."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    context: Uri | None = Field(
        default=None, validation_alias=AliasChoices("context", "@context")
    )
    type: str | None = Field(
        default=None, validation_alias=AliasChoices("type", "@type")
    )
    motivation: str | None = None
    resource: Resource
    on: Uri | None = None

    @classmethod
    def new(cls, resource: Resource, on: Uri) -> Annotation:
        return cls(
            context=Uri(PRESENTATION_CONTEXT),
            type="oa:Annotation",
            motivation="sc:painting",
            resource=resource,
            on=on,
        )


class Canvas(BaseModel):
    """
    IIIF canvas (represents a page/view).

    The canvas id embeds the canvas's position in its sequence.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Uri = Field(validation_alias=AliasChoices("id", "@id"))
    context: Uri | None = Field(
        default=None, validation_alias=AliasChoices("context", "@context")
    )
    type: str = Field(validation_alias=AliasChoices("type", "@type"))
    label: str | dict | list | None = None
    height: int | None = None
    width: int | None = None
    images: list[Annotation] = Field(default_factory=list)

    @classmethod
    def new(
        cls,
        base_urls: BaseUrls,
        item_id: Identifier,
        index: int,
        label: str,
        width: int,
        height: int,
    ) -> Canvas:
        return cls(
            id=Uri.join(base_urls.presentation, item_id.value, "canvas", index),
            context=Uri(PRESENTATION_CONTEXT),
            type="sc:Canvas",
            label=label,
            height=height,
            width=width,
        )

    def add_image(self, annotation: Annotation) -> None:
        self.images.append(annotation)

    def primary_image_service(self) -> ImageService | None:
        """
        Get the image service of the first image annotation.

        Returns:
            Primary ImageService if available, None otherwise
        """
        if not self.images:
            return None
        first_anno = self.images[0]
        return first_anno.resource.first_service()


class Sequence(BaseModel):
    """
    IIIF sequence (ordered list of canvases).

    Canvases keep the order in which they were added.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    context: Uri | None = Field(default=None, alias="@context")
    id: Uri | None = Field(default=None, alias="@id")
    type: str = Field(validation_alias=AliasChoices("type", "@type"))
    label: str | dict | list | None = None
    canvases: list[Canvas] = Field(default_factory=list)

    @classmethod
    def new(
        cls,
        base_urls: BaseUrls,
        item_id: Identifier,
        label: str = DEFAULT_SEQUENCE,
    ) -> Sequence:
        return cls(
            context=Uri(PRESENTATION_CONTEXT),
            id=Uri.join(base_urls.presentation, item_id.value, "sequence", DEFAULT_SEQUENCE),
            type="sc:Sequence",
            label=label,
        )

    def add(self, canvas: Canvas) -> None:
        self.canvases.append(canvas)

    def add_image(
        self,
        base_urls: BaseUrls,
        item_id: Identifier,
        image_id: Identifier,
        label: str,
        image_format: ImageFormat,
        width: int,
        height: int,
    ) -> Canvas:
        """
        Append a canvas painted with a single image.

        The canvas index is the current length of the sequence.

        Returns:
            The appended canvas
        """
        canvas = Canvas.new(base_urls, item_id, len(self.canvases), label, width, height)
        resource = ImageResource.new(
            base_urls, item_id, image_id, image_format, width, height
        )
        canvas.add_image(Annotation.new(resource, canvas.id))
        self.add(canvas)
        return canvas


class Manifest(BaseModel):
    """
    IIIF Presentation 2.1 Manifest.

    A manifest describes one item (here: one directory of images). It
    contains sequences of canvases that define the viewing order.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    context: Uri | None = Field(default=None, alias="@context")
    id: Uri = Field(alias="@id")
    type: Literal["sc:Manifest"] = Field(alias="@type")
    label: str | dict | list | None = None
    metadata: list[Metadata] | None = None
    description: MetadataValue | None = None
    sequences: list[Sequence] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _description_as_text(cls, value: Any) -> Any:
        return coerce_text(value)

    @classmethod
    def new(
        cls,
        base_urls: BaseUrls,
        item_id: Identifier,
        label: str,
        metadata: list[Metadata],
        description: str | None = None,
    ) -> Manifest:
        return cls(
            context=Uri(PRESENTATION_CONTEXT),
            id=Uri.join(base_urls.presentation, item_id.value, "manifest"),
            type="sc:Manifest",
            label=label,
            metadata=metadata,
            description=description,
        )

    def add_sequence(self, sequence: Sequence) -> None:
        self.sequences.append(sequence)

    def canvases(self) -> list[Canvas]:
        """
        Get all canvases in reading order.

        Traverses all sequences and returns all canvases in order.

        Returns:
            List of canvases in reading order
        """
        result: list[Canvas] = []
        for seq in self.sequences:
            result.extend(seq.canvases)
        return result

    def to_json(self) -> dict[str, Any]:
        """
        Serialize to the JSON shape served to IIIF clients.

        Unset optional fields (such as a missing description) are omitted.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
