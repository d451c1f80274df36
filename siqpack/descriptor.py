#!/usr/bin/env python3
"""
descriptor.py

Read a package descriptor (content.xml) into a generic attributed tree.

lxml does the tokenizing; this module only converts its elements into
immutable ``RawElement`` nodes with namespace-free tag names, and turns
scenario ``<atom>`` elements into the closed ``TextAtom`` / ``MediaAtom``
variant consumed by the normalizer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from lxml import etree

from siqpack.errors import DescriptorError


# ============================================================================
# Generic tree
# ============================================================================

@dataclass(frozen=True)
class RawElement:
    """One descriptor element: tag, attributes and ordered children"""
    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: Tuple[Union["RawElement", str], ...] = ()

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)

    @property
    def elements(self) -> List["RawElement"]:
        return [c for c in self.children if isinstance(c, RawElement)]

    def find(self, tag: str) -> Optional["RawElement"]:
        """First child element with this tag, or None."""
        for child in self.children:
            if isinstance(child, RawElement) and child.tag == tag:
                return child
        return None

    def findall(self, tag: str) -> List["RawElement"]:
        return [c for c in self.elements if c.tag == tag]

    @property
    def text(self) -> str:
        """Literal text children joined in order."""
        return "".join(c for c in self.children if isinstance(c, str))


def _local_name(tag) -> str:
    return etree.QName(tag).localname


def _convert(el) -> RawElement:
    children: List[Union[RawElement, str]] = []
    if el.text and el.text.strip():
        children.append(el.text)
    for child in el:
        # Comments and processing instructions carry a non-string tag
        if isinstance(child.tag, str):
            children.append(_convert(child))
        if child.tail and child.tail.strip():
            children.append(child.tail)
    attributes = {_local_name(k): v for k, v in el.attrib.items()}
    return RawElement(tag=_local_name(el.tag), attributes=attributes, children=tuple(children))


def parse_descriptor_bytes(data: bytes, source: str = "<bytes>") -> RawElement:
    """Parse descriptor XML held in memory."""
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as e:
        raise DescriptorError(
            message=f"Descriptor is not well-formed XML: {source}",
            suggestion="Open the descriptor in an XML editor to locate the syntax error",
            context={"source": source, "line": e.lineno},
            cause=e,
        )
    return _convert(root)


def parse_descriptor(path: Path) -> RawElement:
    """
    Parse a descriptor file into a RawElement tree.

    Raises:
        DescriptorError: File missing or not well-formed
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise DescriptorError(
            message=f"Cannot read descriptor {path}",
            context={"path": str(path)},
            cause=e,
        )
    return parse_descriptor_bytes(data, source=str(path))


# ============================================================================
# Scenario atoms
# ============================================================================

class MediaType(str, Enum):
    IMAGE = "image"
    VOICE = "voice"
    SAY = "say"
    MARKER = "marker"


@dataclass(frozen=True)
class TextAtom:
    text: str


@dataclass(frozen=True)
class MediaAtom:
    type_tag: str
    payload: str

    @property
    def media_type(self) -> Optional[MediaType]:
        """Known media type, or None for a tag this version does not handle."""
        try:
            return MediaType(self.type_tag)
        except ValueError:
            return None


Atom = Union[TextAtom, MediaAtom]


def to_atom(element: RawElement) -> Atom:
    """An <atom> without a type attribute is literal text; anything else is media."""
    type_tag = element.get("type")
    if type_tag is None:
        return TextAtom(element.text)
    return MediaAtom(type_tag=type_tag, payload=element.text)


def iter_atoms(scenario: RawElement) -> Iterator[Atom]:
    for element in scenario.findall("atom"):
        yield to_atom(element)
