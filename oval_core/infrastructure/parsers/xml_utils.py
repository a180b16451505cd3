"""
XML helpers shared by the model readers and writers.

OVAL documents put platform-specific elements in family namespaces
(``...#independent``, ``...#unix``); readers match on local names so any
family is handled the same way.
"""

from typing import Optional, Tuple
import xml.etree.ElementTree as ET


OVAL_COMMON_NS = "http://oval.mitre.org/XMLSchema/oval-common-5"
OVAL_DEFINITIONS_NS = "http://oval.mitre.org/XMLSchema/oval-definitions-5"
OVAL_SYSCHAR_NS = "http://oval.mitre.org/XMLSchema/oval-system-characteristics-5"
OVAL_RESULTS_NS = "http://oval.mitre.org/XMLSchema/oval-results-5"

INDEPENDENT_DEF_NS = OVAL_DEFINITIONS_NS + "#independent"
UNIX_DEF_NS = OVAL_DEFINITIONS_NS + "#unix"
INDEPENDENT_SC_NS = OVAL_SYSCHAR_NS + "#independent"
UNIX_SC_NS = OVAL_SYSCHAR_NS + "#unix"

SCHEMA_VERSION = "5.10"

_PREFIXES = {
    "oval": OVAL_COMMON_NS,
    "oval-def": OVAL_DEFINITIONS_NS,
    "oval-sc": OVAL_SYSCHAR_NS,
    "oval-res": OVAL_RESULTS_NS,
    "ind-def": INDEPENDENT_DEF_NS,
    "unix-def": UNIX_DEF_NS,
    "ind-sc": INDEPENDENT_SC_NS,
    "unix-sc": UNIX_SC_NS,
}

for _prefix, _uri in _PREFIXES.items():
    ET.register_namespace(_prefix, _uri)


def split_tag(tag: str) -> Tuple[str, str]:
    """Split ``{namespace}local`` into (namespace, local)."""
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return namespace, local
    return "", tag


def local_name(element: ET.Element) -> str:
    return split_tag(element.tag)[1]


def namespace_of(element: ET.Element) -> str:
    return split_tag(element.tag)[0]


def qname(namespace: str, local: str) -> str:
    return f"{{{namespace}}}{local}" if namespace else local


def find_child(element: ET.Element, name: str) -> Optional[ET.Element]:
    """First direct child with the given local name, in any namespace."""
    for child in element:
        if local_name(child) == name:
            return child
    return None


def find_children(element: ET.Element, name: str):
    return [child for child in element if local_name(child) == name]


def child_text(element: ET.Element, name: str, default: str = "") -> str:
    child = find_child(element, name)
    if child is None or child.text is None:
        return default
    return child.text.strip()


def parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("true", "1")


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def sub_element(parent: ET.Element, namespace: str, local: str, text: Optional[str] = None,
                **attributes) -> ET.Element:
    """Append a child element; ``None`` attribute values are skipped."""
    element = ET.SubElement(parent, qname(namespace, local),
                            {k: v for k, v in attributes.items() if v is not None})
    if text is not None:
        element.text = text
    return element


def generator_element(parent: ET.Element, namespace: str, product_name: str, product_version: str,
                      timestamp: str, schema_version: str = SCHEMA_VERSION) -> ET.Element:
    generator = sub_element(parent, namespace, "generator")
    sub_element(generator, OVAL_COMMON_NS, "product_name", product_name)
    sub_element(generator, OVAL_COMMON_NS, "product_version", product_version)
    sub_element(generator, OVAL_COMMON_NS, "schema_version", schema_version)
    sub_element(generator, OVAL_COMMON_NS, "timestamp", timestamp)
    return generator


def serialize(root: ET.Element) -> bytes:
    """Serialize a tree deterministically, indented, with an XML declaration."""
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="UTF-8", xml_declaration=True) + b"\n"
