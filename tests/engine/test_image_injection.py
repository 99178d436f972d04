"""
Tests for image injection (set_image / get_image_properties).
"""

import random
import re

import pytest

from conftest import paragraph, read_part
from docxblocks.engine.template_processor import TemplateProcessor
from docxblocks.exceptions import UnsupportedImageError
from docxblocks.parser.relationships_parser import RelationshipsParser


@pytest.fixture
def template(make_docx):
    body = paragraph("${logo}") + paragraph("${photo}") + paragraph("${icon}") + paragraph("${chart}")
    return TemplateProcessor(make_docx(body), rng=random.Random(7))


def _defaults(content_types):
    return re.findall(r'<Default Extension="([^"]+)"', content_types)


class TestSetImage:
    """Test set_image."""

    def test_image_fragment_in_main_part(self, template, make_image):
        image_path = make_image("logo.png", size=(400, 200))

        template.set_image("logo", image_path, name="Logo", max_width=100, max_height=100)

        xml = template.main_part
        assert "${logo}" not in xml
        assert '<w:pict><v:shape id="_x0000_i' in xml
        assert 'type="#_x0000_t75"' in xml
        assert 'style="width:100pt;height:50pt"' in xml
        assert 'o:title="Logo"' in xml

    def test_relationship_and_media_are_registered(self, template, make_image):
        image_path = make_image("logo.png")

        template.set_image("logo", image_path)

        images = RelationshipsParser().image_relationships(template.document_rels)
        assert len(images) == 1
        rel = images[0]
        assert rel["target"] == f"media/image{rel['id']}.png"
        assert f'r:id="{rel["id"]}"' in template.main_part
        assert template.get_entry(f"word/media/image{rel['id']}.png") == image_path.read_bytes()

    def test_native_size_without_bounds(self, template, make_image):
        template.set_image("logo", make_image("big.png", size=(640, 480)))

        assert 'style="width:640pt;height:480pt"' in template.main_part

    def test_one_content_type_per_extension(self, template, make_image):
        before = len(_defaults(template.content_types))

        template.set_image("logo", make_image("a.png"))
        assert len(_defaults(template.content_types)) == before + 1

        template.set_image("photo", make_image("b.jpg", image_format="JPEG"))
        assert len(_defaults(template.content_types)) == before + 2

        template.set_image("icon", make_image("c.png"))
        assert len(_defaults(template.content_types)) == before + 2

        assert '<Default Extension="png" ContentType="image/png"/>' in template.content_types
        assert '<Default Extension="jpg" ContentType="image/jpeg"/>' in template.content_types

    def test_existing_content_type_is_not_duplicated(self, template, make_image):
        template.content_types = template.content_types.replace(
            '</Types>', '<Default Extension="PNG" ContentType="image/png"/></Types>'
        )
        before = template.content_types

        template.set_image("logo", make_image("a.png"))

        assert template.content_types == before

    def test_gif_mime_type(self, template, make_image):
        template.set_image("logo", make_image("anim.gif", image_format="GIF"))

        assert '<Default Extension="gif" ContentType="image/gif"/>' in template.content_types

    def test_relationship_ids_are_distinct(self, template, make_image):
        for placeholder in ("logo", "photo", "icon", "chart"):
            template.set_image(placeholder, make_image(f"{placeholder}.png"))

        ids = [rel["id"] for rel in RelationshipsParser().image_relationships(template.document_rels)]
        assert len(ids) == 4
        assert len(set(ids)) == 4
        assert "rId1" not in ids

    def test_shape_ids_are_distinct(self, template, make_image):
        for placeholder in ("logo", "photo", "icon"):
            template.set_image(placeholder, make_image(f"{placeholder}.png"))

        shape_ids = re.findall(r'<v:shape id="([^"]+)"', template.main_part)
        assert len(shape_ids) == 3
        assert len(set(shape_ids)) == 3

    def test_explicit_extension_and_mime_type(self, template, make_image):
        image_path = make_image("upload.bin", image_format="PNG")

        template.set_image("logo", image_path, extension="png", mime_type="image/x-png")

        assert '<Default Extension="png" ContentType="image/x-png"/>' in template.content_types

    def test_missing_placeholder_registers_nothing(self, template, make_image):
        before = (template.main_part, template.document_rels, template.content_types)

        template.set_image("nowhere", make_image("a.png"))

        assert (template.main_part, template.document_rels, template.content_types) == before
        assert not any(name.startswith("word/media/") for name in template._parts)

    def test_missing_placeholder_does_not_read_image(self, template, temp_dir):
        before = (template.main_part, template.document_rels, template.content_types)

        template.set_image("nowhere", temp_dir / "missing.png")

        assert (template.main_part, template.document_rels, template.content_types) == before

    def test_title_is_escaped(self, template, make_image):
        template.set_image("logo", make_image("a.png"), name='Tom & "Jerry"')

        assert 'o:title="Tom &amp; &quot;Jerry&quot;"' in template.main_part


class TestUnsupportedImages:
    """Unsupported or unreadable images fail before any buffer changes."""

    def _snapshot(self, template):
        return (template.main_part, template.document_rels, template.content_types, dict(template._parts))

    def test_unknown_extension(self, template, make_image):
        before = self._snapshot(template)

        with pytest.raises(UnsupportedImageError):
            template.set_image("logo", make_image("scan.bmp", image_format="BMP"))
        assert self._snapshot(template) == before

    def test_undecodable_file(self, template, temp_dir):
        broken = temp_dir / "broken.png"
        broken.write_bytes(b"this is not an image")
        before = self._snapshot(template)

        with pytest.raises(UnsupportedImageError):
            template.set_image("logo", broken)
        assert self._snapshot(template) == before

    def test_format_does_not_match_extension(self, template, make_image):
        with pytest.raises(UnsupportedImageError):
            template.set_image("logo", make_image("photo.png", image_format="JPEG"))

    def test_missing_file(self, template, temp_dir):
        with pytest.raises(UnsupportedImageError):
            template.set_image("logo", temp_dir / "missing.png")


class TestImageProperties:
    """Test get_image_properties."""

    def test_descriptor_fields(self, template, make_image):
        image = template.get_image_properties(make_image("a.png", size=(4000, 2000)),
                                              max_width=1000, max_height=1000)

        assert (image.width, image.height) == (1000, 500)
        assert image.extension == "png"
        assert image.mime_type == "image/png"
        assert image.media == f"image{image.rels_id}.png"
        assert image.xml_type == '<Default Extension="png" ContentType="image/png"/>'
        assert f'Target="media/{image.media}"' in image.xml_rel
        assert image.title == "Image"

    def test_properties_do_not_mutate(self, template, make_image):
        before = (template.main_part, template.document_rels, template.content_types)

        template.get_image_properties(make_image("a.png"))

        assert (template.main_part, template.document_rels, template.content_types) == before


class TestSaveWithImages:
    """Saved packages carry the injected image consistently."""

    def test_saved_package(self, template, make_image, temp_dir):
        image_path = make_image("logo.png")
        template.set_image("logo", image_path)

        output = template.save_as(temp_dir / "out.docx")

        document = read_part(output, "word/document.xml").decode("utf-8")
        rels = read_part(output, "word/_rels/document.xml.rels").decode("utf-8")
        content_types = read_part(output, "[Content_Types].xml").decode("utf-8")
        rel = RelationshipsParser().image_relationships(rels)[0]

        assert "<w:t><w:pict>" not in document
        assert "</w:pict></w:t>" not in document
        assert f'r:id="{rel["id"]}"' in document
        assert 'Extension="png"' in content_types
        assert read_part(output, f"word/media/image{rel['id']}.png") == image_path.read_bytes()
