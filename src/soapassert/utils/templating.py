# soapassert/utils/templating.py
"""
Jinja2 rendering of structured values into XML.

SOAP header bodies and mapping-shaped comparison XML are both nested
scalar / mapping / sequence values. They are rendered through the
``structured_value.xml`` template so that escaping is handled by Jinja2's
autoescape rather than by hand-built strings.
"""

import logging
import re
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, Template
from pydantic import JsonValue

logger: logging.Logger = logging.getLogger(__name__)

# XML 1.0 element name, optionally prefixed (prefix:local)
XML_NAME_PATTERN: re.Pattern[str] = re.compile(
    r'^(?:[A-Za-z_][\w.\-]*:)?[A-Za-z_][\w.\-]*$'
)

TEMPLATES_DIR: Path = Path(__file__).resolve().parent.parent / 'templates'

# Prefix bound to the namespace of a rendered root element that has none
DEFAULT_PREFIX: str = 'ns1'


def is_valid_xml_name(name: str) -> bool:
    """Return True if ``name`` can be used as an element name."""
    return bool(XML_NAME_PATTERN.match(name))


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """
    Build (once) the Jinja2 environment for the package templates.

    Raises:
        FileNotFoundError: If the templates directory is missing from the
                           installed package.
    """
    if not TEMPLATES_DIR.exists():
        error_message: str = f'Templates directory not found at: {TEMPLATES_DIR}'
        logger.error(error_message)
        raise FileNotFoundError(error_message)

    environment: Environment = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=True,  # Automatically escape variables for XML safety
        trim_blocks=True,
        lstrip_blocks=True,
    )
    logger.debug('Jinja2 environment initialized with templates from: %r', TEMPLATES_DIR)
    return environment


def _check_names(value: JsonValue, path: str) -> None:
    """Reject mapping keys that cannot become unqualified element names."""
    if isinstance(value, Mapping):
        for key, child in value.items():
            if not is_valid_xml_name(str(key)):
                raise ValueError(f'Invalid XML element name {key!r} at {path}')
            if ':' in str(key):
                raise ValueError(
                    f'Prefixed element name {key!r} at {path} is not supported, '
                    'only the root element can be namespaced'
                )
            _check_names(child, f'{path}/{key}')
    elif isinstance(value, list):
        for child in value:
            _check_names(child, path)


def render_structured_value(
    name: str,
    value: JsonValue,
    namespace: str | None = None,
) -> str:
    """
    Render ``value`` as an XML element called ``name``.

    Args:
        name: Root element name.
        value: Scalar, mapping or list (any ``JsonValue``).
        namespace: Optional namespace URI for the root element only. Child
                   elements are left unqualified.

    Returns:
        The rendered XML text (a single element, no XML declaration).

    Raises:
        ValueError: If ``name`` or any mapping key is not a valid element name,
                    a mapping key is prefixed, or ``name`` is prefixed
                    without a ``namespace`` to bind the prefix to.
    """
    if not is_valid_xml_name(name):
        raise ValueError(f'Invalid XML element name {name!r}')
    if ':' in name and not namespace:
        raise ValueError(f'Prefixed element name {name!r} needs a namespace')
    _check_names(value, name)

    tag: str = name
    prefix: str | None = None
    if namespace:
        prefix, _, local_name = name.rpartition(':')
        if not prefix:
            prefix = DEFAULT_PREFIX
            tag = f'{prefix}:{local_name}'

    template: Template = get_environment().get_template('structured_value.xml')
    rendered: str = template.render(
        tag=tag, value=value, prefix=prefix, namespace=namespace
    )
    logger.debug('Rendered structured value %r:\n%s', name, rendered)
    return rendered.strip()
