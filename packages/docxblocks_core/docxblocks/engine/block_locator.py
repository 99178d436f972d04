"""
Block locator - finds ${name} ... ${/name} regions in a serialized main part.

Works in two phases:
1. Structural locate: parse the XML with lxml, find the text nodes holding
   the opening and closing markers and walk up to their paragraphs.
2. Textual slice: serialize the tree again (lxml collapses empty elements
   such as <w:rPr></w:rPr> to <w:rPr/>) and cut the paragraphs and the
   markup between them out of that normalized text.

The paragraphs are bracketed with comment sentinels before serializing so
the slice offsets come straight from the serializer output.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional, Tuple
import logging

from lxml import etree

from ..exceptions import TemplateStructureError
from ..utils.xml_utils import W_NS, MACRO_PATTERN

logger = logging.getLogger(__name__)

PARAGRAPH_TAG = W_NS + 'p'
TEXT_TAG = W_NS + 't'


@dataclass
class BlockMatch:
    """Markup of a located block."""
    begin: str  # paragraph holding ${name}
    body: str   # markup strictly between the two marker paragraphs
    end: str    # paragraph holding ${/name}

    @property
    def markup(self) -> str:
        return self.begin + self.body + self.end


@dataclass
class LocatedBlock:
    """A block match together with its position in the normalized document."""
    xml: str    # normalized serialization of the whole main part
    start: int  # offset of the opening paragraph in xml
    stop: int   # offset just past the closing paragraph in xml
    match: BlockMatch

    def replace(self, replacement: str) -> str:
        """Normalized document with the whole block replaced."""
        return self.xml[:self.start] + replacement + self.xml[self.stop:]


def parse_document(xml: str) -> etree._Element:
    """Parse a main part buffer with lxml."""
    parser = etree.XMLParser(remove_blank_text=False, resolve_entities=False, huge_tree=True)
    try:
        return etree.fromstring(xml.encode('utf-8'), parser)
    except etree.XMLSyntaxError as e:
        raise TemplateStructureError("Main document part is not well-formed XML", str(e)) from e


def serialize_document(root: etree._Element) -> str:
    tree = root.getroottree()
    return etree.tostring(
        tree,
        xml_declaration=True,
        encoding='UTF-8',
        standalone=tree.docinfo.standalone,
    ).decode('utf-8')


def find_markers(root: etree._Element, name: str) -> Optional[Tuple[etree._Element, etree._Element]]:
    """First w:t holding ${name} and the first later w:t holding ${/name}."""
    open_tag = '${' + name + '}'
    close_tag = '${/' + name + '}'

    start_node = None
    for node in root.iter(TEXT_TAG):
        text = node.text or ''
        if start_node is None:
            if open_tag in text:
                start_node = node
            continue
        if close_tag in text:
            return start_node, node
    return None


def enclosing_paragraph(node: etree._Element) -> etree._Element:
    current = node.getparent()
    while current is not None:
        if current.tag == PARAGRAPH_TAG:
            return current
        current = current.getparent()
    raise TemplateStructureError(
        "Can not find the paragraph enclosing the block marker",
        (node.text or '').strip(),
    )


def _insert_before(element: etree._Element, sentinel: etree._Element) -> None:
    if element.getparent() is None:
        raise TemplateStructureError("Block paragraph has no parent element")
    element.addprevious(sentinel)


def _insert_after(element: etree._Element, sentinel: etree._Element) -> None:
    if element.getparent() is None:
        raise TemplateStructureError("Block paragraph has no parent element")
    tail = element.tail
    element.tail = None
    element.addnext(sentinel)
    sentinel.tail = tail


def locate_block(xml: str, name: str) -> Optional[LocatedBlock]:
    """
    Locate block `name` in a main part buffer.

    Args:
        xml: Serialized main document part
        name: Block name (without ${ })

    Returns:
        LocatedBlock, or None when either marker is missing or both markers
        sit in the same paragraph

    Raises:
        TemplateStructureError: Unparseable XML, marker outside any paragraph
            or overlapping marker paragraphs
    """
    root = parse_document(xml)
    markers = find_markers(root, name)
    if markers is None:
        logger.debug(f"Block '{name}' not found")
        return None

    start_p = enclosing_paragraph(markers[0])
    end_p = enclosing_paragraph(markers[1])
    if start_p is end_p:
        logger.debug(f"Block '{name}' opens and closes in the same paragraph")
        return None

    token = uuid.uuid4().hex
    sentinels = [f"docxblocks-{token}-{i}" for i in range(4)]
    _insert_before(start_p, etree.Comment(sentinels[0]))
    _insert_after(start_p, etree.Comment(sentinels[1]))
    _insert_before(end_p, etree.Comment(sentinels[2]))
    _insert_after(end_p, etree.Comment(sentinels[3]))

    marked = serialize_document(root)
    pieces = []
    rest = marked
    for sentinel in sentinels:
        head, found, rest = rest.partition(f"<!--{sentinel}-->")
        if not found:
            raise TemplateStructureError(
                f"Block '{name}' paragraphs overlap",
                "closing marker paragraph is nested in the opening one or vice versa",
            )
        pieces.append(head)
    pieces.append(rest)

    head, begin, body, end, tail = pieces
    match = BlockMatch(begin=begin, body=body, end=end)
    start = len(head)
    return LocatedBlock(
        xml=head + match.markup + tail,
        start=start,
        stop=start + len(match.markup),
        match=match,
    )


def suffix_macros(xml: str, index: int) -> str:
    """Rewrite every ${token} to ${token#index}."""
    return MACRO_PATTERN.sub(lambda m: '${%s#%d}' % (m.group(1), index), xml)
