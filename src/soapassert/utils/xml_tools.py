# soapassert/utils/xml_tools.py
"""
XML helpers shared by the session and the assertions.

Provides parsing with proper error mapping, canonicalization (C14N),
coercion of the various "XML-ish" inputs an assertion accepts, and a few
small tree accessors.
"""
# pyright: reportAttributeAccessIssue=false, reportUnknownMemberType=false

import logging
import re
from collections.abc import Mapping
from typing import Any

from lxml import etree

from ..errors import ParseError
from .templating import render_structured_value

logger: logging.Logger = logging.getLogger(__name__)

SOAP_NAMESPACES: dict[str, str] = {
    'soap11': 'http://schemas.xmlsoap.org/soap/envelope/',
    'soap12': 'http://www.w3.org/2003/05/soap-envelope',
}

# Entity expansion and network access are never needed for SOAP payloads
_PARSER: etree.XMLParser = etree.XMLParser(resolve_entities=False, no_network=True)

# A str is already decoded, so its declared encoding no longer applies
_XML_DECLARATION: re.Pattern[str] = re.compile(r'^\ufeff?\s*<\?xml\s[^>]*\?>')


def parse_xml(xml_string: str | bytes) -> etree._Element:
    """
    Parse an XML string into an lxml Element.

    Args:
        xml_string: Raw XML text. ``str`` input has its XML declaration
                    dropped and is parsed as UTF-8, whatever encoding the
                    declaration named.

    Returns:
        The root element of the parsed XML tree.

    Raises:
        ParseError: If the XML is empty or malformed.
    """
    data: bytes = (
        _XML_DECLARATION.sub('', xml_string, count=1).encode('utf-8')
        if isinstance(xml_string, str)
        else xml_string
    )
    try:
        return etree.fromstring(data, parser=_PARSER)
    except etree.XMLSyntaxError as e:
        raise ParseError(f'Malformed XML: {e}') from e


def to_xml(value: Any) -> etree._Element:
    """
    Coerce an assertion argument into an XML element.

    Accepted inputs:
    - ``str`` / ``bytes``: parsed as XML text
    - ``etree._ElementTree``: its root element
    - ``etree._Element``: returned as is
    - a mapping with exactly one key: rendered through the structured value
      template, the key being the root element name

    Raises:
        ParseError: If text (or a rendered mapping) is not well-formed.
        TypeError: For any other input type.
        ValueError: For a mapping that does not have exactly one root key.
    """
    if isinstance(value, etree._ElementTree):
        return value.getroot()
    if isinstance(value, etree._Element):
        return value
    if isinstance(value, str | bytes):
        return parse_xml(value)
    if isinstance(value, Mapping):
        if len(value) != 1:
            raise ValueError(
                f'A mapping must have exactly one root key to become XML, got {len(value)}'
            )
        ((root_name, root_value),) = value.items()
        return parse_xml(render_structured_value(str(root_name), root_value))

    raise TypeError(f'Cannot convert {type(value).__name__} to XML')


def canonicalize(value: Any) -> str:
    """
    Return the canonical (C14N 1.0, without comments) form of ``value``.

    ``value`` is anything accepted by :func:`to_xml`.
    """
    element: etree._Element = to_xml(value)
    return etree.tostring(element, method='c14n', with_comments=False).decode('utf-8')


def qualified_name(element: etree._Element) -> str:
    """
    Return the element name as written in the source: ``prefix:local`` or ``local``.

    Namespace URIs are not part of the name, so ``<ns:user>`` and
    ``<x:user>`` are different names even if both prefixes map to the
    same URI.
    """
    local_name: str = etree.QName(element).localname
    if element.prefix:
        return f'{element.prefix}:{local_name}'
    return local_name


def child_elements(element: etree._Element) -> list[etree._Element]:
    """Direct element children, skipping comments and processing instructions."""
    return [child for child in element if isinstance(child.tag, str)]


def find_soap_fault(root: etree._Element) -> etree._Element | None:
    """
    Locate a SOAP 1.1 or 1.2 Fault element in an envelope, if any.

    Unlike a client that treats faults as errors, this only reports the
    element so the caller can log it; fault documents are still valid
    responses to assert on.
    """
    for namespace in SOAP_NAMESPACES.values():
        fault: etree._Element | None = root.find(f'.//{{{namespace}}}Fault')
        if fault is not None:
            return fault
    return None


def describe_fault(fault: etree._Element) -> str:
    """Format a Fault element as ``[code]: reason`` for log messages."""
    fault_code: str = (
        fault.findtext('faultcode')
        or fault.findtext('.//{http://www.w3.org/2003/05/soap-envelope}Value')
        or 'Unknown'
    )
    fault_string: str = (
        fault.findtext('faultstring')
        or fault.findtext('.//{http://www.w3.org/2003/05/soap-envelope}Text')
        or 'Unknown error'
    )
    return f'[{fault_code.strip()}]: {fault_string.strip()}'
