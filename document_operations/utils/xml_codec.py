"""
XML / JSON Conversion

Converts parsed XML trees into JSON-serializable mappings before they are
stored, and JSON structures back into XML text for XML read responses.

Both directions use the same conventions:
- attributes are keys prefixed with '@'
- element text next to attributes or children is stored under '#text'
- repeated child elements become a list
- a top-level '?xml' key holds the XML declaration attributes
"""

from typing import Any, Dict, List, Mapping, Optional, Union
from xml.etree import ElementTree as ET


ATTRIBUTE_PREFIX = "@"
TEXT_KEY = "#text"
DECLARATION_KEY = "?xml"


def _local_name(tag: str) -> str:
    # ElementTree spells namespaced tags as '{uri}local'
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def element_to_dict(element: Union[ET.Element, ET.ElementTree]) -> Dict[str, Any]:
    """
    Convert an XML element into a mapping keyed by its tag.

    Example:
        <root a="1"><x>1</x><x>2</x></root>
        -> {"root": {"@a": "1", "x": ["1", "2"]}}
    """
    if isinstance(element, ET.ElementTree):
        element = element.getroot()
    return {_local_name(element.tag): _element_value(element)}


def _element_value(element: ET.Element) -> Any:
    children = list(element)
    text = (element.text or "").strip()

    if not element.attrib and not children:
        return text or None

    value: Dict[str, Any] = {}
    for name, attr_value in element.attrib.items():
        value[ATTRIBUTE_PREFIX + _local_name(name)] = attr_value
    if text:
        value[TEXT_KEY] = text

    for child in children:
        key = _local_name(child.tag)
        child_value = _element_value(child)
        if key not in value:
            value[key] = child_value
        elif isinstance(value[key], list):
            value[key].append(child_value)
        else:
            value[key] = [value[key], child_value]
    return value


def encode_name(name: str) -> str:
    """
    Make a mapping key usable as an XML element or attribute name.

    Characters that are not allowed are written as '_xHHHH_'.
    """
    if not name:
        return "_"
    encoded = []
    for i, ch in enumerate(name):
        allowed = ch.isalpha() or ch == "_" or (i > 0 and (ch.isdigit() or ch in "-."))
        encoded.append(ch if allowed else f"_x{ord(ch):04X}_")
    return "".join(encoded)


def _scalar_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _fill(element: ET.Element, value: Any) -> None:
    if isinstance(value, Mapping):
        for key, item in value.items():
            key = str(key)
            if key.startswith(ATTRIBUTE_PREFIX):
                element.set(encode_name(key[1:]), _scalar_text(item) or "")
            elif key == TEXT_KEY:
                element.text = _scalar_text(item)
            else:
                _append(element, key, item)
    else:
        element.text = _scalar_text(value)


def _append(parent: ET.Element, key: str, value: Any) -> None:
    if isinstance(value, list):
        for item in value:
            _append(parent, key, item)
        return
    _fill(ET.SubElement(parent, encode_name(key)), value)


def dict_to_xml(data: Mapping[str, Any]) -> str:
    """
    Convert a mapping with exactly one root key into XML text.

    An optional '?xml' key becomes the XML declaration, e.g.
    {"?xml": {"@version": "1.0"}, "root": {...}} -> '<?xml version="1.0"?><root>...</root>'

    Raises:
        ValueError: If the mapping does not have exactly one root element
    """
    declaration: Optional[Mapping[str, Any]] = None
    roots: List[tuple] = []
    for key, value in data.items():
        if key == DECLARATION_KEY:
            declaration = value
        else:
            roots.append((key, value))

    if len(roots) != 1 or isinstance(roots[0][1], list):
        raise ValueError("XML document must have exactly one root element")

    tag, value = roots[0]
    root = ET.Element(encode_name(tag))
    _fill(root, value)
    text = ET.tostring(root, encoding="unicode")

    if declaration:
        attributes = " ".join(
            f'{key[1:]}="{_scalar_text(item)}"'
            for key, item in declaration.items()
            if key.startswith(ATTRIBUTE_PREFIX)
        )
        text = f"<?xml {attributes}?>{text}"
    return text


def parse_xml(text: str) -> ET.Element:
    """Parse XML text into an element; raises ET.ParseError on malformed input."""
    return ET.fromstring(text)
