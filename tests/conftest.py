"""
Pytest configuration for docxblocks
"""

import logging
import sys
import tempfile
import zipfile
from pathlib import Path

import pytest
from PIL import Image as PILImage


DOCUMENT_NAMESPACES = (
    'xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main" '
    'xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships" '
    'xmlns:v="urn:schemas-microsoft-com:vml" '
    'xmlns:o="urn:schemas-microsoft-com:office:office"'
)


def document_xml(body: str) -> str:
    """Wrap body markup into a complete word/document.xml."""
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f'<w:document {DOCUMENT_NAMESPACES}><w:body>{body}</w:body></w:document>'
    )


def paragraph(text: str, attrs: str = "") -> str:
    """A one-run paragraph."""
    open_tag = f"<w:p {attrs}>" if attrs else "<w:p>"
    return f"{open_tag}<w:r><w:t>{text}</w:t></w:r></w:p>"


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid handler leaks between tests."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(name)s - %(levelname)s - %(message)s'))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()
    package_logger = logging.getLogger("docxblocks")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def sample_zip_content():
    """Create sample ZIP content for a minimal DOCX package."""
    return {
        '[Content_Types].xml': '''<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
    <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
    <Default Extension="xml" ContentType="application/xml"/>
    <Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
</Types>''',
        '_rels/.rels': '''<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
    <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="word/document.xml"/>
</Relationships>''',
        'word/document.xml': document_xml(paragraph("Test paragraph")),
        'word/_rels/document.xml.rels': '''<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
    <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles" Target="styles.xml"/>
</Relationships>''',
        'word/styles.xml': '''<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:styles xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"/>''',
    }


@pytest.fixture
def write_docx(temp_dir):
    """Write a dict of parts as a .docx file and return its path."""
    def _write(parts, name="template.docx"):
        docx_path = temp_dir / name
        with zipfile.ZipFile(docx_path, 'w') as zf:
            for filename, content in parts.items():
                zf.writestr(filename, content)
        return docx_path
    return _write


@pytest.fixture
def make_docx(write_docx, sample_zip_content):
    """Build a .docx whose body is the given markup (extra parts optional)."""
    def _make(body, extra_parts=None, name="template.docx"):
        parts = dict(sample_zip_content)
        parts['word/document.xml'] = document_xml(body)
        parts.update(extra_parts or {})
        return write_docx(parts, name)
    return _make


@pytest.fixture
def make_image(temp_dir):
    """Create an image file with Pillow and return its path."""
    def _make(name="image.png", size=(400, 200), image_format="PNG"):
        image_path = temp_dir / name
        PILImage.new("RGB", size, (200, 30, 30)).save(image_path, format=image_format)
        return image_path
    return _make


def read_part(docx_path, part_name):
    with zipfile.ZipFile(docx_path) as zf:
        return zf.read(part_name)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    # Ignore logging errors during tests
    logging.raiseExceptions = False
