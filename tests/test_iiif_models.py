"""Tests for IIIF v2 Pydantic models."""

import json

import pytest

from forager.identifiers import Identifier
from forager.iiif.v2 import (
    Annotation,
    BaseUrls,
    Canvas,
    ImageFormat,
    ImageResource,
    ImageService,
    LocalizedValue,
    Manifest,
    Metadata,
    Sequence,
    Uri,
)


PRESENTATION = "http://localhost:8989"
IMAGE = "https://images.example.org/iiif/2"
ITEM = Identifier("books-section1")
IMAGE_ID = Identifier("books-section1-page1.jpg")


def build_manifest(base_urls: BaseUrls) -> Manifest:
    sequence = Sequence.new(base_urls, ITEM)
    sequence.add_image(base_urls, ITEM, IMAGE_ID, "page1.jpg", ImageFormat.JPEG, 800, 1200)
    manifest = Manifest.new(
        base_urls,
        ITEM,
        ITEM.value,
        [Metadata.key_value("location", ITEM.value)],
        "A book",
    )
    manifest.add_sequence(sequence)
    return manifest


class TestUri:
    """Tests for Uri and BaseUrls."""

    def test_join(self):
        """Test joining base URL and segments."""
        uri = Uri.join("https://example.org", "a", "canvas", 3)
        assert str(uri) == "https://example.org/a/canvas/3"

    def test_serializes_as_string(self):
        """Test that Uri dumps to a bare string."""
        assert Uri("https://example.org/x").model_dump() == "https://example.org/x"

    def test_base_urls_strip_trailing_slash(self):
        """Test that trailing slashes do not double up in derived URIs."""
        urls = BaseUrls(presentation="http://localhost:8989/", image="https://img/iiif/")
        assert urls.presentation == "http://localhost:8989"
        assert urls.image == "https://img/iiif"


class TestImageFormat:
    """Tests for ImageFormat."""

    def test_extensions(self):
        assert ImageFormat.JPEG.extension == "jpg"
        assert ImageFormat.PNG.extension == "png"
        assert ImageFormat.UNKNOWN.extension == ""

    def test_mime_types(self):
        assert ImageFormat.JPEG.mime_type == "image/jpeg"
        assert ImageFormat.PNG.mime_type == "image/png"
        assert ImageFormat.UNKNOWN.mime_type == "image/unknown"


class TestUriDerivation:
    """Tests for the URIs derived by the constructors."""

    def test_manifest_id(self, base_urls):
        manifest = Manifest.new(base_urls, ITEM, "label", [])
        assert str(manifest.id) == f"{PRESENTATION}/books-section1/manifest"

    def test_sequence_id(self, base_urls):
        sequence = Sequence.new(base_urls, ITEM)
        assert str(sequence.id) == f"{PRESENTATION}/books-section1/sequence/normal"
        assert sequence.label == "normal"

    def test_canvas_ids_follow_sequence_position(self, base_urls):
        """Test that the canvas index is its zero-based position."""
        sequence = Sequence.new(base_urls, ITEM)
        for name in ["a.jpg", "b.jpg", "c.jpg"]:
            sequence.add_image(
                base_urls, ITEM, Identifier(f"books-section1-{name}"), name, ImageFormat.JPEG, 10, 10
            )

        ids = [str(c.id) for c in sequence.canvases]
        assert ids == [f"{PRESENTATION}/books-section1/canvas/{i}" for i in range(3)]

    def test_image_service_uses_item_identifier(self, base_urls):
        """Test that every image of an item shares one service id."""
        service = ImageService.new(base_urls, ITEM)
        assert str(service.id) == f"{IMAGE}/books-section1"

    def test_image_asset_id(self, base_urls):
        resource = ImageResource.new(base_urls, ITEM, IMAGE_ID, ImageFormat.JPEG, 800, 1200)
        assert str(resource.id) == (
            f"{IMAGE}/books-section1/books-section1-page1.jpg/full/full/default.jpg"
        )
        assert resource.format == "image/jpeg"

    def test_image_asset_id_unknown_format(self, base_urls):
        """Test that unknown formats leave the extension empty."""
        image_id = Identifier("books-section1-scan.tif")
        resource = ImageResource.new(base_urls, ITEM, image_id, ImageFormat.UNKNOWN, 5, 5)
        assert str(resource.id).endswith("/full/full/default.")
        assert resource.format == "image/unknown"

    def test_annotation_targets_its_canvas(self, base_urls):
        sequence = Sequence.new(base_urls, ITEM)
        canvas = sequence.add_image(base_urls, ITEM, IMAGE_ID, "page1.jpg", ImageFormat.PNG, 1, 2)
        annotation = canvas.images[0]
        assert annotation.on == canvas.id
        assert annotation.motivation == "sc:painting"


class TestMetadata:
    """Tests for metadata values."""

    def test_single_value(self):
        assert Metadata.key_value("location", "x").model_dump() == {"label": "location", "value": "x"}

    def test_many_values(self):
        entry = Metadata(label="Authors", value=["A", "B"])
        assert entry.model_dump() == {"label": "Authors", "value": ["A", "B"]}

    def test_localized_values(self):
        """Test multi-language values parse from dicts and keep their order."""
        entry = Metadata.model_validate(
            {"label": "Place", "value": [{"value": "Cologne", "language": "en"}, {"value": "Köln", "language": "de"}]}
        )
        assert entry.value == [
            LocalizedValue(value="Cologne", language="en"),
            LocalizedValue(value="Köln", language="de"),
        ]

    def test_localized_values_accept_json_ld_keys(self):
        entry = Metadata.model_validate({"label": "Place", "value": [{"@value": "Köln", "@language": "de"}]})
        assert entry.value == [LocalizedValue(value="Köln", language="de")]

    def test_scalars_become_text(self):
        """Test that numbers, booleans and dates are read as strings."""
        from datetime import date

        assert Metadata.model_validate({"label": 1, "value": 1920}).model_dump() == {"label": "1", "value": "1920"}
        assert Metadata.model_validate({"label": "Pages", "value": [12, 14.5]}).value == ["12", "14.5"]
        assert Metadata.model_validate({"label": "Digitized", "value": True}).value == "true"
        assert Metadata.model_validate({"label": "Date", "value": date(1920, 5, 1)}).value == "1920-05-01"

    def test_localized_number(self):
        entry = Metadata.model_validate({"label": "Year", "value": [{"@value": 1920, "@language": "en"}]})
        assert entry.value == [LocalizedValue(value="1920", language="en")]

    def test_localized_label(self):
        entry = Metadata.model_validate(
            {"label": [{"@value": "Title", "@language": "en"}, {"@value": "Titel", "@language": "de"}], "value": "Letters"}
        )
        assert entry.label == [
            LocalizedValue(value="Title", language="en"),
            LocalizedValue(value="Titel", language="de"),
        ]

    def test_manifest_with_localized_description(self):
        """Test that v2 manifests from other servers parse."""
        manifest = Manifest.model_validate(
            {
                "@id": "https://example.org/iiif/book1/manifest",
                "@type": "sc:Manifest",
                "label": "Book 1",
                "description": [{"@value": "A book", "@language": "en"}],
                "metadata": [{"label": [{"@value": "Author", "@language": "en"}], "value": "Anne"}],
                "sequences": [],
            }
        )
        assert manifest.description == [LocalizedValue(value="A book", language="en")]
        assert manifest.metadata[0].label == [LocalizedValue(value="Author", language="en")]


class TestSerialization:
    """Tests for the JSON shape served to clients."""

    def test_manifest_keys(self, base_urls):
        data = build_manifest(base_urls).to_json()
        assert list(data) == [
            "@context", "@id", "@type", "label", "metadata", "description", "sequences",
        ]
        assert data["@context"] == "http://iiif.io/api/presentation/2/context.json"
        assert data["@type"] == "sc:Manifest"

    def test_nested_keys(self, base_urls):
        """Test field names and order of every nested object."""
        data = build_manifest(base_urls).to_json()
        sequence = data["sequences"][0]
        canvas = sequence["canvases"][0]
        annotation = canvas["images"][0]
        resource = annotation["resource"]

        assert list(sequence) == ["@context", "@id", "type", "label", "canvases"]
        assert list(canvas) == ["id", "context", "type", "label", "height", "width", "images"]
        assert list(annotation) == ["context", "type", "motivation", "resource", "on"]
        assert list(resource) == ["id", "type", "format", "service", "width", "height"]
        assert list(resource["service"]) == ["context", "id", "profile", "protocol"]

    def test_nested_values(self, base_urls):
        data = build_manifest(base_urls).to_json()
        canvas = data["sequences"][0]["canvases"][0]
        annotation = canvas["images"][0]

        assert canvas["type"] == "sc:Canvas"
        assert (canvas["width"], canvas["height"]) == (800, 1200)
        assert annotation["type"] == "oa:Annotation"
        assert annotation["on"] == canvas["id"]
        assert annotation["resource"]["type"] == "dctypes:Image"
        assert annotation["resource"]["service"] == {
            "context": "http://iiif.io/api/image/2/context.json",
            "id": f"{IMAGE}/books-section1",
            "profile": "http://iiif.io/api/image/2/level2.json",
            "protocol": "http://iiif.io/api/image",
        }

    def test_missing_description_is_omitted(self, base_urls):
        data = Manifest.new(base_urls, ITEM, "label", []).to_json()
        assert "description" not in data
        assert data["sequences"] == []

    def test_serializable(self, base_urls):
        """Test that the dump is plain JSON."""
        json.dumps(build_manifest(base_urls).to_json())

    def test_parses_back(self, base_urls):
        """Test that served manifests parse into the same models."""
        manifest = Manifest.model_validate(build_manifest(base_urls).to_json())

        canvases = manifest.canvases()
        assert len(canvases) == 1
        service = canvases[0].primary_image_service()
        assert service is not None
        assert str(service.id) == f"{IMAGE}/books-section1"


class TestPydanticValidation:
    """Tests for Pydantic validation behavior."""

    def test_manifest_requires_id(self):
        """Test that manifest requires @id field."""
        with pytest.raises(Exception):  # pydantic.ValidationError
            Manifest(type="sc:Manifest")

    def test_manifest_requires_type(self):
        """Test that manifest requires @type field."""
        with pytest.raises(Exception):  # pydantic.ValidationError
            Manifest(id="https://example.org/manifest")

    def test_canvas_requires_id(self):
        """Test that canvas requires an id field."""
        with pytest.raises(Exception):  # pydantic.ValidationError
            Canvas(type="sc:Canvas")

    def test_annotation_requires_resource(self):
        with pytest.raises(Exception):  # pydantic.ValidationError
            Annotation(motivation="sc:painting")
