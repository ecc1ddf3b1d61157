"""
Test suite for the XML/mapping conversion used for stored XML and XML reads.
"""

from xml.etree import ElementTree as ET

import pytest

from document_operations.utils import dict_to_xml, element_to_dict, encode_name, parse_xml


class TestElementToDict:
    """XML trees into mappings."""

    def test_attributes_text_and_repeated_children(self) -> None:
        element = parse_xml('<book lang="en">Intro<author>A</author><author>B</author></book>')

        assert element_to_dict(element) == {
            "book": {"@lang": "en", "#text": "Intro", "author": ["A", "B"]}
        }

    def test_namespaces_should_be_stripped(self) -> None:
        element = parse_xml('<r xmlns="urn:x"><v>1</v></r>')

        assert element_to_dict(element) == {"r": {"v": "1"}}

    def test_element_tree_and_empty_leaf(self) -> None:
        tree = ET.ElementTree(parse_xml("<r><empty/></r>"))

        assert element_to_dict(tree) == {"r": {"empty": None}}

    def test_malformed_text_should_raise_parse_error(self) -> None:
        with pytest.raises(ET.ParseError):
            parse_xml("<r>")


class TestDictToXml:
    """Mappings into XML text."""

    def test_declaration_attributes_and_lists(self) -> None:
        text = dict_to_xml({
            "?xml": {"@version": "1.0", "@standalone": "no"},
            "r": {"@id": 3, "item": [1, True], "#text": "t"},
        })

        assert text.startswith('<?xml version="1.0" standalone="no"?>')
        root = ET.fromstring(text.split("?>", 1)[1])
        assert root.get("id") == "3"
        assert [i.text for i in root.findall("item")] == ["1", "true"]
        assert root.text == "t"

    def test_keys_should_be_encoded_as_valid_names(self) -> None:
        text = dict_to_xml({"r": {"first name": "Ann", "1st": "x"}})

        root = ET.fromstring(text)
        assert root.find("first_x0020_name").text == "Ann"
        assert root.find("_x0031_st").text == "x"

    @pytest.mark.parametrize("data", [{}, {"a": 1, "b": 2}, {"a": [1, 2]}])
    def test_mapping_without_single_root_should_raise(self, data) -> None:
        with pytest.raises(ValueError):
            dict_to_xml(data)

    def test_encode_name_of_empty_key(self) -> None:
        assert encode_name("") == "_"
