"""Relationships parser for DOCX packages."""

from __future__ import annotations

import xml.etree.ElementTree as ET
import posixpath
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Union

from ..exceptions import PackageError
from ..utils.xml_utils import NAMESPACES, IMAGE_RELATIONSHIP_TYPE


class RelationshipsParser:
    """Parse `_rels/*.rels` manifests into dictionaries keyed by relationship id."""

    NAMESPACE = NAMESPACES['rels']

    def parse_relationships(self, rels_xml: Optional[Union[str, bytes]]) -> Dict[str, Dict[str, str]]:
        if not rels_xml:
            return {}
        if isinstance(rels_xml, str):
            rels_xml = rels_xml.encode('utf-8')

        try:
            root = ET.fromstring(rels_xml)
        except ET.ParseError as e:
            raise PackageError("Invalid relationships part", str(e)) from e

        relationships: Dict[str, Dict[str, str]] = {}
        for rel_element in root.findall(f"{{{self.NAMESPACE}}}Relationship"):
            rel = self.parse_relationship(rel_element)
            if rel["id"]:
                relationships[rel["id"]] = rel
        return relationships

    def parse_relationship(self, rel_element: ET.Element) -> Dict[str, str]:
        return {
            "id": rel_element.get("Id", ""),
            "type": rel_element.get("Type", ""),
            "target": rel_element.get("Target", ""),
            "target_mode": rel_element.get("TargetMode", "Internal"),
        }

    def image_relationships(self, rels_xml: Optional[Union[str, bytes]]) -> List[Dict[str, str]]:
        """Relationships of the image type, in manifest order."""
        return [
            rel for rel in self.parse_relationships(rels_xml).values()
            if rel["type"] == IMAGE_RELATIONSHIP_TYPE
        ]

    def resolve_relationship_target(self, target: str, source_path: str) -> str:
        if not target:
            return ""
        target_path = PurePosixPath(target)
        if target_path.is_absolute():
            return str(target_path).lstrip("/")
        base = PurePosixPath(source_path).parent
        return posixpath.normpath(base.joinpath(target_path).as_posix())
