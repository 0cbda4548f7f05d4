# soapassert/structure.py
"""
Structural containment of an XML fragment inside a response.

A "schema" fragment such as ``<query><name/></query>`` describes a shape:
element names only, at every depth, in any sibling order. Attribute values
and text content are ignored, and extra elements in the response are
allowed.

Known limitation: sibling matching is first-match without backtracking.
For each schema child the matcher commits to the FIRST candidate child
with the same name and lets that pair decide. If it fails deeper down,
later same-named siblings are not tried, so

    schema     <a><b><x/></b></a>
    candidate  <a><b/><b><x/></b></a>

does not match. Two schema siblings with the same name are also both
checked against that same first candidate child.
"""
# pyright: reportAttributeAccessIssue=false

import logging

from lxml import etree

from .utils.xml_tools import child_elements, qualified_name

logger: logging.Logger = logging.getLogger(__name__)


def structure_matches(schema: etree._Element, candidate: etree._Element) -> bool:
    """
    Decide whether ``candidate`` contains the shape described by ``schema``.

    The names of ``schema`` and ``candidate`` themselves are not compared;
    callers pair them up by name beforehand. Neither tree is modified.

    Args:
        schema: Element whose children describe the required shape.
        candidate: Element from the response being tested.

    Returns:
        True if, for every child of ``schema``, the first same-named child
        of ``candidate`` exists and recursively matches it.
    """
    candidate_children: list[etree._Element] = child_elements(candidate)
    return all(
        _has_matching_child(required, candidate_children)
        for required in child_elements(schema)
    )


def _has_matching_child(
    required: etree._Element, candidates: list[etree._Element]
) -> bool:
    name: str = qualified_name(required)
    for child in candidates:
        if qualified_name(child) == name:
            # First same-named child decides, no backtracking
            return structure_matches(required, child)
    return False


def find_structure_candidates(
    document: etree._Element, schema_root: etree._Element
) -> list[etree._Element]:
    """
    Return every element of ``document`` named like ``schema_root``.

    The document root itself is included, in document order.
    """
    name: str = qualified_name(schema_root)
    return [
        element
        for element in document.iter()
        if isinstance(element.tag, str) and qualified_name(element) == name
    ]


def document_contains_structure(
    document: etree._Element, schema_root: etree._Element
) -> bool | None:
    """
    Check whether any element of ``document`` matches ``schema_root``.

    Returns:
        None if no element shares the schema root's name, otherwise whether
        at least one of those elements matches the schema's shape.
    """
    candidates: list[etree._Element] = find_structure_candidates(document, schema_root)
    logger.debug(
        'Structure root %r has %d candidate(s) in document',
        qualified_name(schema_root),
        len(candidates),
    )
    if not candidates:
        return None
    return any(structure_matches(schema_root, candidate) for candidate in candidates)
