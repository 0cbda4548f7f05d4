# soapassert/locator.py
"""
Element lookup by XPath or CSS selector.

CSS selectors are translated to XPath with cssselect (the translator used
by ``lxml.cssselect``); anything that is not valid CSS is evaluated as raw
XPath. Every prefixed namespace declared in the document is registered for
the query, so ``//ns:user`` or the CSS form ``ns|user`` work without extra
setup.
"""
# pyright: reportAttributeAccessIssue=false, reportUnknownMemberType=false

import logging
from typing import Any

from cssselect import GenericTranslator
from cssselect import SelectorError as CssSelectorError
from lxml import etree

from .errors import SelectorError

logger: logging.Logger = logging.getLogger(__name__)

_TRANSLATOR: GenericTranslator = GenericTranslator()

# A located node is an element or, for selectors such as ``//user/@id``,
# the string result lxml returns for attributes and text nodes.
LocatedNode = etree._Element | str


def document_namespaces(document: etree._Element) -> dict[str, str]:
    """
    Collect prefix -> URI bindings declared anywhere in ``document``.

    The first declaration of a prefix in document order wins. The default
    (unprefixed) namespace cannot be used in XPath 1.0 and is skipped.
    """
    namespaces: dict[str, str] = {}
    for element in document.iter():
        if not isinstance(element.tag, str):
            continue
        for prefix, uri in element.nsmap.items():
            if prefix and prefix not in namespaces:
                namespaces[prefix] = uri
    return namespaces


def query_xpath(document: etree._Element, xpath: str) -> list[Any]:
    """
    Evaluate ``xpath`` against ``document``.

    Returns:
        The selected nodes in document order; an empty list is a valid
        "zero matches" outcome.

    Raises:
        SelectorError: If the expression is malformed, uses an undeclared
                       prefix, or does not select a node-set (for example
                       ``count(//user)``).
    """
    try:
        result: Any = document.xpath(xpath, namespaces=document_namespaces(document))
    except etree.XPathError as e:
        raise SelectorError(f'XPath selector is malformed: {xpath!r} ({e})', xpath) from e

    if not isinstance(result, list):
        raise SelectorError(
            f'XPath selector does not select nodes: {xpath!r} returned {result!r}',
            xpath,
        )
    return result


def css_to_xpath(selector: str) -> str | None:
    """Translate a CSS selector to XPath, or return None if it is not valid CSS."""
    try:
        return _TRANSLATOR.css_to_xpath(selector)
    except CssSelectorError as e:
        logger.debug('Selector %r is not CSS (%s), treating it as XPath', selector, e)
        return None


def locate(document: etree._Element, selector: str) -> LocatedNode | None:
    """
    Resolve ``selector`` to the first matching node of ``document``.

    The selector is tried as CSS first; if it is not valid CSS, or the
    translated query matches nothing, it is evaluated as XPath.

    Returns:
        The first node in document order, or None if neither
        interpretation matched anything.

    Raises:
        SelectorError: If the selector is neither valid CSS nor valid XPath.
    """
    css_xpath: str | None = css_to_xpath(selector)
    if css_xpath is not None:
        logger.debug('CSS selector %r translated to %r', selector, css_xpath)
        try:
            matches: list[Any] = query_xpath(document, css_xpath)
        except SelectorError:
            # e.g. a namespace prefix the document does not declare
            matches = []
        if matches:
            return matches[0]

    try:
        matches = query_xpath(document, selector)
    except SelectorError:
        if css_xpath is None:
            raise
        # Valid CSS that matched nothing; not an XPath error
        return None

    return matches[0] if matches else None


def text_content(node: LocatedNode) -> str:
    """Concatenated text of an element (like DOM ``textContent``), or the string itself."""
    if isinstance(node, etree._Element):
        if not isinstance(node.tag, str):
            # comment or processing instruction
            return node.text or ''
        return ''.join(node.itertext())
    return str(node)
