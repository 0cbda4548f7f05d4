# soapassert/assertions.py
"""
Assertions on the last SOAP response.

:class:`SoapAssertions` is mixed into :class:`~soapassert.session.SoapSession`
and only ever reads the session's recorded response. Every check raises a
:class:`~soapassert.errors.SoapAssertionFailure` (an ``AssertionError``)
carrying the expected and actual values when it does not hold.

XML arguments may be given as XML text, an lxml element or element tree,
or a one-key mapping (see :func:`soapassert.utils.xml_tools.to_xml`).
Equality and inclusion compare canonical (C14N) strings; inclusion is a
plain substring test on those strings, so it is sensitive to namespace
declarations and whitespace.
"""
# pyright: reportAttributeAccessIssue=false

import logging
from typing import Any

from lxml import etree

from .errors import ElementNotFound, SoapAssertionFailure, StateError
from .locator import LocatedNode, locate, query_xpath, text_content
from .structure import document_contains_structure
from .utils.xml_tools import canonicalize, qualified_name, to_xml

logger: logging.Logger = logging.getLogger(__name__)

NO_RESPONSE_MESSAGE: str = 'There is no response available yet'

# Bound to the xml prefix by definition; never listed in nsmap
XML_NAMESPACE: str = 'http://www.w3.org/XML/1998/namespace'


class SoapAssertions:
    """Response checks shared by every session type."""

    xml_response: etree._Element | None
    response_status_code: int | None

    def _require_response(self) -> etree._Element:
        if self.xml_response is None:
            raise StateError(NO_RESPONSE_MESSAGE)
        return self.xml_response

    # ------------------------------------------------------------------
    # HTTP status
    # ------------------------------------------------------------------

    def see_response_code_is(self, code: int) -> None:
        """
        Check the HTTP status code of the last response.

        Raises:
            StateError: If no call has completed with a status line yet.
            SoapAssertionFailure: If the status differs from ``code``.
        """
        if self.response_status_code is None:
            raise StateError(NO_RESPONSE_MESSAGE)
        if self.response_status_code != code:
            raise SoapAssertionFailure(
                'Response code does not match',
                expected=code,
                actual=self.response_status_code,
            )

    # ------------------------------------------------------------------
    # Canonical XML comparisons
    # ------------------------------------------------------------------

    def see_soap_response_equals(self, xml: Any) -> None:
        """
        Check the response equals ``xml`` once both are canonicalized.

        Example:
            >>> session.see_soap_response_equals(
            ...     '<?xml version="1.0"?><soapenv:Envelope xmlns:soapenv="..."><soapenv:Body>'
            ...     '<result>1</result></soapenv:Body></soapenv:Envelope>'
            ... )
        """
        expected: str = canonicalize(xml)
        actual: str = canonicalize(self._require_response())
        if actual != expected:
            raise SoapAssertionFailure(
                'XML response does not equal the expected XML',
                expected=expected,
                actual=actual,
            )

    def dont_see_soap_response_equals(self, xml: Any) -> None:
        """Check the canonical response differs from the canonical ``xml``."""
        unexpected: str = canonicalize(xml)
        if canonicalize(self._require_response()) == unexpected:
            raise SoapAssertionFailure(
                'XML response equals XML that should not be returned',
                expected=f'anything but {unexpected}',
            )

    def see_soap_response_includes(self, xml: Any) -> None:
        """
        Check the canonical ``xml`` appears verbatim in the canonical response.

        Example:
            >>> session.see_soap_response_includes('<result>1</result>')
            >>> session.see_soap_response_includes({'result': 1})
        """
        expected: str = canonicalize(xml)
        actual: str = canonicalize(self._require_response())
        if expected not in actual:
            raise SoapAssertionFailure(
                'Expected XML not found in XML response',
                expected=expected,
                actual=actual,
            )

    def dont_see_soap_response_includes(self, xml: Any) -> None:
        """Check the canonical ``xml`` does not appear in the canonical response."""
        unexpected: str = canonicalize(xml)
        actual: str = canonicalize(self._require_response())
        if unexpected in actual:
            raise SoapAssertionFailure(
                'Unexpected XML found in XML response',
                expected=f'no occurrence of {unexpected}',
                actual=actual,
            )

    # ------------------------------------------------------------------
    # Structure and XPath
    # ------------------------------------------------------------------

    def see_soap_response_contains_structure(self, xml: Any) -> None:
        """
        Check some element of the response has the shape of ``xml``.

        Only element names are compared, children may appear in any order
        and extra elements are ignored. The structure does not need to
        start at the document root.

        Example:
            >>> session.see_soap_response_contains_structure(
            ...     '<query><name></name></query>'
            ... )

        Raises:
            ElementNotFound: If no element is named like the structure root.
            SoapAssertionFailure: If elements with that name exist but none
                                  has the required shape.
        """
        schema_root: etree._Element = to_xml(xml)
        root_name: str = qualified_name(schema_root)
        logger.debug('Structure:\n%s', etree.tostring(schema_root, encoding='unicode'))
        logger.debug('Structure Root: %s', root_name)

        matched: bool | None = document_contains_structure(
            self._require_response(), schema_root
        )
        if matched is None:
            raise ElementNotFound(
                f'Element {root_name} not found in response', expected=root_name
            )
        if not matched:
            raise SoapAssertionFailure(
                'This structure is not in response',
                expected=etree.tostring(schema_root, encoding='unicode'),
            )

    def see_soap_response_contains_xpath(self, xpath: str) -> None:
        """
        Check ``xpath`` selects at least one node of the response.

        Example:
            >>> session.see_soap_response_contains_xpath('//root/user[@id=1]')

        Raises:
            SelectorError: If the XPath is malformed.
        """
        matches: list[Any] = query_xpath(self._require_response(), xpath)
        if not matches:
            raise SoapAssertionFailure(
                f'XPath {xpath!r} matched no nodes in response',
                expected='at least one node',
                actual=0,
            )

    def dont_see_soap_response_contains_xpath(self, xpath: str) -> None:
        """
        Check ``xpath`` selects nothing in the response.

        Raises:
            SelectorError: If the XPath is malformed; that is never
                           reported as "zero matches".
        """
        matches: list[Any] = query_xpath(self._require_response(), xpath)
        if matches:
            raise SoapAssertionFailure(
                f'XPath {xpath!r} matched {len(matches)} node(s) in response',
                expected=0,
                actual=len(matches),
            )

    # ------------------------------------------------------------------
    # Grabbers
    # ------------------------------------------------------------------

    def grab_text_content_from(self, css_or_xpath: str) -> str:
        """Return the text content of the first node matched by CSS or XPath."""
        return text_content(self._match_element(css_or_xpath))

    def grab_attribute_from(self, css_or_xpath: str, attribute: str) -> str:
        """
        Return ``attribute`` of the first element matched by CSS or XPath.

        ``attribute`` may be a plain name, ``prefix:name`` using a prefix
        in scope on the element, or Clark notation ``{uri}name``.

        Raises:
            SoapAssertionFailure: If the matched element lacks the attribute.
        """
        node: LocatedNode = self._match_element(css_or_xpath)
        if isinstance(node, etree._Element):
            key: str = _attribute_key(node, attribute)
            value: str | None = node.get(key)
            if value is not None:
                return value
        raise SoapAssertionFailure(
            f"Attribute not found in element matched by '{css_or_xpath}'",
            expected=attribute,
        )

    def _match_element(self, css_or_xpath: str) -> LocatedNode:
        node: LocatedNode | None = locate(self._require_response(), css_or_xpath)
        if node is None:
            raise ElementNotFound(
                f"No node matched CSS or XPath '{css_or_xpath}'",
                expected=css_or_xpath,
            )
        return node


def _attribute_key(element: etree._Element, attribute: str) -> str:
    prefix, _, local_name = attribute.partition(':')
    if not local_name or attribute.startswith('{'):
        return attribute
    uri: str | None = XML_NAMESPACE if prefix == 'xml' else element.nsmap.get(prefix)
    if uri is None:
        return attribute
    return f'{{{uri}}}{local_name}'
