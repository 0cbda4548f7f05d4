# soapassert/session.py
"""
SOAP test session.

This module provides :class:`SoapSession`, the object a test works with:
it queues SOAP headers, sends requests through a transport, keeps the last
request/response documents and HTTP status, and exposes the response
assertions from :mod:`soapassert.assertions`.
"""

import logging
import re
from pathlib import Path
from types import TracebackType
from typing import Any

from lxml import etree  # pyright: ignore[reportAttributeAccessIssue]
from pydantic import JsonValue

from .assertions import SoapAssertions
from .errors import ConfigurationError
from .headers import SoapHeader
from .transport import SoapExchange, SoapParams, SoapTransport, ZeepTransport
from .utils import SoapAssertConfig, load_config
from .utils.xml_tools import describe_fault, find_soap_fault, parse_xml

# Set up module-level logger
logger: logging.Logger = logging.getLogger(__name__)

# First header line of the form "HTTP/1.1 200 OK"
STATUS_LINE_PATTERN: re.Pattern[str] = re.compile(r'^HTTP/\d(?:\.\d)?\s+(\d{3})\b')


def parse_status_code(response_headers: str) -> int | None:
    """
    Extract the status code from the first HTTP status line in a header block.

    Returns:
        The numeric status, or None if no line looks like a status line.
    """
    for line in response_headers.splitlines():
        match: re.Match[str] | None = STATUS_LINE_PATTERN.match(line.strip())
        if match is not None:
            return int(match.group(1))
    return None


class SoapSession(SoapAssertions):
    """
    Stateful SOAP client for tests.

    Each session owns its own transport and recorded documents; sessions
    share nothing, so parallel tests should each create their own.

    Pending SOAP headers are NOT cleared after a request: every header added
    with :meth:`have_soap_header` is sent with every later request of the
    session, in the order it was added, until :meth:`clear_soap_headers`
    is called.

    Attributes:
        config: The validated configuration.
        transport: The transport used for calls (zeep by default).
        soap_headers: Pending headers, in insertion order.
        xml_request: Root element of the last request envelope, or None.
        xml_response: Root element of the last response envelope, or None.
        response: Decoded result of the last call (a ``zeep.exceptions.Fault``
                  for fault responses), or None.
        response_status_code: HTTP status of the last call that carried a
                              status line, or None before any such call.

    Usage:
        >>> with SoapSession(wsdl='http://localhost:8000/users?wsdl') as soap:
        ...     soap.have_soap_header('Auth', {'token': 'secret'}, namespace='urn:auth')
        ...     soap.send_soap_request('CreateUser', {'name': 'davert'})
        ...     soap.see_response_code_is(200)
        ...     soap.see_soap_response_contains_structure('<user><name/></user>')
    """

    def __init__(
        self,
        config_path: Path | str | None = None,
        config: SoapAssertConfig | None = None,
        wsdl: str | None = None,
        transport: SoapTransport | None = None,
    ) -> None:
        """
        Create a session.

        Configuration is taken from, in order of precedence: ``config``,
        ``wsdl`` (defaults for everything else), ``config_path``, then the
        default config.yaml location.

        Args:
            config_path: Path to a YAML configuration file.
            config: A pre-loaded configuration.
            wsdl: URL or path of the WSDL, for configuration-free use.
            transport: Transport to use instead of the zeep transport.

        Raises:
            ConfigurationError: If the configuration is invalid or has no WSDL.
            FileNotFoundError: If the configuration file does not exist.
        """
        if config is not None:
            logger.debug('Initializing SoapSession with injected configuration')
            self.config: SoapAssertConfig = config
        elif wsdl is not None:
            self.config = SoapAssertConfig.from_mapping({'soap': {'wsdl': wsdl}})
        elif config_path is not None:
            logger.info('Loading soapassert configuration from: %r', config_path)
            self.config = load_config(config_path)
        else:
            logger.info('Loading soapassert configuration from default location')
            self.config = load_config()

        # model_construct() bypasses validation, so check the one required value
        if not self.config.soap.wsdl or not self.config.soap.wsdl.strip():
            raise ConfigurationError('A WSDL location is required (soap.wsdl)')

        self.transport: SoapTransport = transport or ZeepTransport(self.config)

        self.soap_headers: list[SoapHeader] = []
        self.xml_request: etree._Element | None = None
        self.xml_response: etree._Element | None = None
        self.response: Any = None
        self.response_status_code: int | None = None

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    def have_soap_header(
        self,
        name: str,
        value: JsonValue = None,
        namespace: str | None = None,
    ) -> SoapHeader:
        """
        Queue a SOAP header for every following request.

        Args:
            name: Header element name.
            value: Structured header content (scalar, mapping or list).
            namespace: Header namespace; defaults to ``soap.schema_url``.

        Returns:
            The queued header.

        Raises:
            pydantic.ValidationError: If the name or value is not acceptable.
            ParseError: If the header does not render to well-formed XML.
        """
        header: SoapHeader = SoapHeader(
            namespace=namespace or self.config.soap.schema_url,
            name=name,
            value=value,
        )
        # Render once now so a bad header fails at the step that added it
        header.to_element()
        self.soap_headers.append(header)
        logger.debug(
            'Queued SOAP header %r in %r (%d pending)',
            header.name,
            header.namespace,
            len(self.soap_headers),
        )
        return header

    def add_header(
        self, namespace: str | None, name: str, value: JsonValue = None
    ) -> SoapHeader:
        """Queue a header given as (namespace, name, value); None selects the default namespace."""
        return self.have_soap_header(name, value, namespace=namespace)

    def clear_soap_headers(self) -> None:
        """Drop every pending SOAP header."""
        logger.debug('Clearing %d pending SOAP header(s)', len(self.soap_headers))
        self.soap_headers.clear()

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def send_soap_request(self, action: str, params: SoapParams = None) -> Any:
        """
        Call ``action`` and record the request, response and HTTP status.

        SOAP faults are recorded like any other response. If the call fails
        the previously recorded request, response and status are kept.

        Args:
            action: Operation name as declared in the WSDL.
            params: Keyword arguments as a mapping, or positional arguments
                    as a sequence.

        Returns:
            The decoded response (also available as :attr:`response`).

        Raises:
            TransportError: Network or WSDL failure.
            ParseError: Request or response envelope is not well-formed XML.
        """
        logger.info(
            'Sending SOAP request %r with %d header(s)', action, len(self.soap_headers)
        )
        exchange: SoapExchange = self.transport.call(
            action, params, tuple(self.soap_headers)
        )

        xml_request: etree._Element = parse_xml(exchange.request_xml)
        xml_response: etree._Element = parse_xml(exchange.response_xml)
        status_code: int | None = parse_status_code(exchange.response_headers)

        logger.debug('***REQUEST BODY (XML)***')
        logger.debug(etree.tostring(xml_request, encoding='unicode'))
        logger.debug('***RESPONSE HEADERS***')
        logger.debug(exchange.response_headers)
        logger.debug('***RESPONSE BODY (XML)***')
        logger.debug(etree.tostring(xml_response, encoding='unicode'))

        # Nothing is recorded until both documents parsed
        self.xml_request = xml_request
        self.xml_response = xml_response
        self.response = exchange.value
        if status_code is not None:
            self.response_status_code = status_code

        fault: etree._Element | None = find_soap_fault(xml_response)
        if fault is not None:
            logger.warning(
                'SOAP request %r returned a Fault %s', action, describe_fault(fault)
            )
        else:
            logger.info(
                'SOAP request %r completed (HTTP %r)', action, self.response_status_code
            )

        return self.response

    def call(self, action: str, params: SoapParams = None) -> Any:
        """Alias of :meth:`send_soap_request`."""
        return self.send_soap_request(action, params)

    # ------------------------------------------------------------------
    # Grabbers
    # ------------------------------------------------------------------

    def grab_xml_request(self) -> etree._Element | None:
        """Return the last request envelope, or None before the first call."""
        return self.xml_request

    def grab_xml_response(self) -> etree._Element | None:
        """Return the last response envelope, or None before the first call."""
        return self.xml_response

    def grab_response(self) -> Any:
        """Return the decoded result of the last call."""
        return self.response

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the transport's HTTP resources."""
        self.transport.close()

    def __enter__(self) -> 'SoapSession':
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        _exc_value: BaseException | None,
        _traceback: TracebackType | None,
    ) -> None:
        logger.debug(
            'Exiting SoapSession context manager (exception occurred: %s)',
            exc_type is not None,
        )
        self.close()

    def __repr__(self) -> str:
        return (
            f'SoapSession('
            f'wsdl={self.config.soap.wsdl}, '
            f'headers={len(self.soap_headers)}, '
            f'status={self.response_status_code}'
            f')'
        )
