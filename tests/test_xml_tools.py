"""Tests for XML parsing and canonicalization utilities."""

import pytest
from lxml import etree

from soapassert.errors import ParseError
from soapassert.utils.xml_tools import (
    canonicalize,
    child_elements,
    describe_fault,
    find_soap_fault,
    parse_xml,
    qualified_name,
    to_xml,
)


class TestParseXml:
    """Tests for parse_xml function."""

    def test_parse_valid_soap_response(self, users_response: str) -> None:
        """Test parsing a valid SOAP response."""
        root = parse_xml(users_response)

        assert isinstance(root, etree._Element)
        assert qualified_name(root) == 'soapenv:Envelope'

    def test_parse_string_with_encoding_declaration(self) -> None:
        """Test that an XML declaration with encoding is accepted for str input."""
        root = parse_xml('<?xml version="1.0" encoding="UTF-8"?><result>1</result>')

        assert root.text == '1'

    def test_parse_string_declaring_another_encoding(self) -> None:
        """Test that non-ASCII text survives a declaration naming a non-UTF-8 encoding."""
        root = parse_xml('<?xml version="1.0" encoding="ISO-8859-1"?><a>é ü</a>')

        assert root.text == 'é ü'

    def test_canonical_form_of_declared_latin1_string(self) -> None:
        """Test that the declared encoding of a str does not change its canonical form."""
        declared = canonicalize('<?xml version="1.0" encoding="ISO-8859-1"?><a>café</a>')

        assert declared == canonicalize('<a>café</a>') == '<a>café</a>'

    def test_bytes_keep_their_declared_encoding(self) -> None:
        """Test that bytes are decoded with the encoding they declare."""
        data = '<?xml version="1.0" encoding="ISO-8859-1"?><a>é</a>'.encode('iso-8859-1')

        assert parse_xml(data).text == 'é'

    def test_parse_bytes(self) -> None:
        """Test parsing bytes input."""
        root = parse_xml(b'<result>1</result>')

        assert root.tag == 'result'

    def test_parse_malformed_xml_raises_parse_error(self) -> None:
        """Test that malformed XML raises ParseError, chained to lxml's error."""
        with pytest.raises(ParseError, match='Malformed XML') as exc_info:
            parse_xml('<invalid><xml>')

        assert isinstance(exc_info.value.__cause__, etree.XMLSyntaxError)

    def test_parse_empty_string_raises_parse_error(self) -> None:
        """Test that an empty string is never treated as an empty document."""
        with pytest.raises(ParseError):
            parse_xml('')


class TestToXml:
    """Tests for to_xml coercion."""

    def test_element_is_returned_unchanged(self) -> None:
        """Test that an element passes through."""
        element = etree.fromstring('<a/>')

        assert to_xml(element) is element

    def test_element_tree_returns_root(self) -> None:
        """Test that an element tree yields its root."""
        tree = etree.ElementTree(etree.fromstring('<a><b/></a>'))

        assert to_xml(tree).tag == 'a'

    def test_mapping_is_rendered(self) -> None:
        """Test that a one-key mapping becomes an element."""
        element = to_xml({'result': {'code': 1, 'message': 'ok'}})

        assert canonicalize(element) == (
            '<result><code>1</code><message>ok</message></result>'
        )

    def test_mapping_with_several_roots_rejected(self) -> None:
        """Test that a mapping must have exactly one root key."""
        with pytest.raises(ValueError, match='exactly one root key'):
            to_xml({'a': 1, 'b': 2})

    def test_unsupported_type_rejected(self) -> None:
        """Test that other types raise TypeError."""
        with pytest.raises(TypeError, match='Cannot convert int to XML'):
            to_xml(42)


class TestCanonicalize:
    """Tests for canonicalize function."""

    def test_attribute_order_does_not_matter(self) -> None:
        """Test that attribute declaration order is normalized."""
        first = canonicalize('<user role="admin" id="1"/>')
        second = canonicalize('<user id="1" role="admin"/>')

        assert first == second == '<user id="1" role="admin"></user>'

    def test_declaration_and_comments_are_dropped(self) -> None:
        """Test that the XML declaration and comments do not take part."""
        canonical = canonicalize(
            '<?xml version="1.0" encoding="UTF-8"?><result><!-- note -->1</result>'
        )

        assert canonical == '<result>1</result>'

    def test_canonical_form_is_a_fixed_point(self, users_response: str) -> None:
        """Test that re-parsing the canonical form canonicalizes identically."""
        canonical = canonicalize(users_response)

        assert canonicalize(canonical) == canonical


class TestTreeHelpers:
    """Tests for qualified_name and child_elements."""

    def test_qualified_name_keeps_prefix(self) -> None:
        """Test that the prefix as written is part of the name."""
        root = parse_xml('<ns:user xmlns:ns="urn:x"><name/></ns:user>')

        assert qualified_name(root) == 'ns:user'
        assert qualified_name(root[0]) == 'name'

    def test_default_namespace_name_has_no_prefix(self) -> None:
        """Test that default-namespace elements use the local name."""
        root = parse_xml('<user xmlns="urn:x"/>')

        assert qualified_name(root) == 'user'

    def test_child_elements_skip_comments(self) -> None:
        """Test that comments and processing instructions are ignored."""
        root = parse_xml('<a><!-- c --><b/><?pi x?><c/></a>')

        assert [child.tag for child in child_elements(root)] == ['b', 'c']


class TestFindSoapFault:
    """Tests for find_soap_fault and describe_fault."""

    def test_no_fault_returns_none(self, users_response: str) -> None:
        """Test that a normal response has no fault."""
        assert find_soap_fault(parse_xml(users_response)) is None

    def test_soap11_fault_is_found(self, fault_response: str) -> None:
        """Test that a SOAP 1.1 fault is found and described."""
        fault = find_soap_fault(parse_xml(fault_response))

        assert fault is not None
        assert describe_fault(fault) == '[soapenv:Client]: User not found'

    def test_soap12_fault_is_found(self) -> None:
        """Test that a SOAP 1.2 fault is found and described."""
        xml = (
            '<env:Envelope xmlns:env="http://www.w3.org/2003/05/soap-envelope">'
            '<env:Body><env:Fault>'
            '<env:Code><env:Value>env:Sender</env:Value></env:Code>'
            '<env:Reason><env:Text xml:lang="en">Bad input</env:Text></env:Reason>'
            '</env:Fault></env:Body></env:Envelope>'
        )
        fault = find_soap_fault(parse_xml(xml))

        assert fault is not None
        assert describe_fault(fault) == '[env:Sender]: Bad input'

    def test_fault_without_details_uses_defaults(self) -> None:
        """Test describing a fault that lacks code and string."""
        xml = (
            '<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/">'
            '<soapenv:Body><soapenv:Fault/></soapenv:Body></soapenv:Envelope>'
        )
        fault = find_soap_fault(parse_xml(xml))

        assert fault is not None
        assert describe_fault(fault) == '[Unknown]: Unknown error'
