"""
XML helpers shared by the template processors.

Namespace constants, macro (placeholder) normalization and the small
string-level escaping rules used on serialized WordprocessingML.
"""

import re
from typing import Dict

NAMESPACES: Dict[str, str] = {
    'w': 'http://schemas.openxmlformats.org/wordprocessingml/2006/main',
    'r': 'http://schemas.openxmlformats.org/officeDocument/2006/relationships',
    'v': 'urn:schemas-microsoft-com:vml',
    'o': 'urn:schemas-microsoft-com:office:office',
    'rels': 'http://schemas.openxmlformats.org/package/2006/relationships',
    'ct': 'http://schemas.openxmlformats.org/package/2006/content-types',
}

W_NS = "{%s}" % NAMESPACES['w']

IMAGE_RELATIONSHIP_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"

# ${name} and ${name#3}
MACRO_PATTERN = re.compile(r'\$\{(.*?)\}')

# "${" ... "}" with run markup in between, e.g. "$</w:t></w:r><w:r><w:t>{name}";
# the gap never crosses a paragraph boundary
_IN_PARAGRAPH = r'(?!</?w:p[\s>/])'
BROKEN_MACRO_PATTERN = re.compile(
    r'\$(?:\{|(?:%s[^{$])*?>\{)(?:%s[^}$])*?\}' % (_IN_PARAGRAPH, _IN_PARAGRAPH)
)
TAG_PATTERN = re.compile(r'<[^>]*>')


def ensure_macro(name: str) -> str:
    """Wrap a variable name into ${...} unless it already looks like a macro."""
    if not name.startswith('${') and not name.endswith('}'):
        return '${' + name + '}'
    return name


def escape_xml(value: str) -> str:
    """Escape text for use inside an element body."""
    return (
        value.replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
    )


def escape_attribute(value: str) -> str:
    return escape_xml(value).replace('"', '&quot;')


def fix_broken_macros(xml: str) -> str:
    """Strip run markup that Word inserts inside ${...} macros."""
    return BROKEN_MACRO_PATTERN.sub(lambda m: TAG_PATTERN.sub('', m.group(0)), xml)


def format_number(value: float) -> str:
    """Compact decimal form: 1000.0 -> '1000', 333.3333 -> '333.3333'."""
    text = '%.4f' % value
    return text.rstrip('0').rstrip('.')
