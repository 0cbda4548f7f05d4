# soapassert/transport.py
"""
SOAP transport layer.

The session talks to a service through :class:`SoapTransport`, a single
``call`` method that returns a :class:`SoapExchange`: the decoded result
plus the raw request envelope, raw response envelope and the HTTP status
line with headers. :class:`ZeepTransport` is the production implementation:

- zeep parses the WSDL and serializes the envelope
- HTTP goes through a ``requests.Session`` (timeouts and SSL verification
  come from the ``client`` configuration section)
- a ``HistoryPlugin`` captures the envelope that was actually sent
- :class:`RecordingTransport` keeps the last ``requests.Response`` so the
  raw reply survives SOAP faults
"""
# pyright: reportUnknownMemberType=false, reportAttributeAccessIssue=false

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import requests
from lxml import etree
from zeep import Client, Transport
from zeep.exceptions import Error as ZeepError
from zeep.exceptions import Fault
from zeep.exceptions import TransportError as ZeepTransportError
from zeep.exceptions import XMLSyntaxError as ZeepXMLSyntaxError
from zeep.plugins import HistoryPlugin
from zeep.proxy import ServiceProxy

from .errors import ParseError, TransportError
from .headers import SoapHeader
from .utils.config_loader import SoapAssertConfig

# Set up module-level logger
logger: logging.Logger = logging.getLogger(__name__)

# Operation arguments: keywords, positional values, or nothing
SoapParams = Mapping[str, Any] | Sequence[Any] | None


@dataclass(frozen=True)
class SoapExchange:
    """
    Everything recorded from one SOAP call.

    Attributes:
        value: The decoded result of the operation, or the ``zeep.exceptions.Fault``
               when the service answered with a SOAP fault.
        request_xml: The serialized request envelope as sent.
        response_xml: The raw response body as received.
        response_headers: HTTP status line followed by one ``Name: value``
                          line per response header, CRLF separated.
    """

    value: Any
    request_xml: str | bytes
    response_xml: str | bytes
    response_headers: str


class SoapTransport(ABC):
    """
    Abstract base class for SOAP transports.

    Implementations must deliver SOAP fault replies as normal exchanges and
    raise :class:`~soapassert.errors.TransportError` for anything that
    prevented a reply from being received.
    """

    @abstractmethod
    def call(
        self,
        action: str,
        params: SoapParams,
        headers: Sequence[SoapHeader],
    ) -> SoapExchange:
        """
        Invoke ``action`` with ``params``, sending ``headers`` in order.

        Raises:
            TransportError: Network or WSDL failure.
            ParseError: The service replied with something that is not XML.
        """
        pass

    def close(self) -> None:
        """Release any resources held by the transport."""
        return None


class RecordingTransport(Transport):
    """zeep transport that remembers the last HTTP response it received."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.last_response: requests.Response | None = None

    def post(self, address: str, message: Any, headers: dict[str, str]) -> requests.Response:
        response: requests.Response = super().post(address, message, headers)
        self.last_response = response
        logger.debug(
            'Received HTTP %r from %r (%d bytes)',
            response.status_code,
            address,
            len(response.content or b''),
        )
        return response


def format_response_headers(response: requests.Response) -> str:
    """
    Rebuild the raw status line and header block of a ``requests`` response.

    Example:
        ``HTTP/1.1 500 Internal Server Error\\r\\nContent-Type: text/xml``
    """
    version: Any = getattr(response.raw, 'version', None)
    if not isinstance(version, int) or version <= 0:
        version = 11
    major, minor = divmod(version, 10)

    status_line: str = f'HTTP/{major}.{minor} {response.status_code} {response.reason or ""}'
    lines: list[str] = [status_line.rstrip()]
    lines.extend(f'{name}: {value}' for name, value in response.headers.items())
    return '\r\n'.join(lines)


def _split_params(params: SoapParams) -> tuple[tuple[Any, ...], dict[str, Any]]:
    if params is None:
        return (), {}
    if isinstance(params, Mapping):
        return (), dict(params)
    if isinstance(params, str | bytes):
        raise TypeError('SOAP parameters must be a mapping or a sequence, not a string')
    return tuple(params), {}


class ZeepTransport(SoapTransport):
    """
    SOAP transport backed by zeep and requests.

    The WSDL is loaded lazily on the first call so that constructing a
    session never touches the network; loading failures are reported as
    :class:`TransportError` from that first call.

    Attributes:
        config: The validated session configuration.
        http_session: The ``requests.Session`` shared by WSDL loading and calls.
        history: zeep plugin recording the last sent envelope.
    """

    def __init__(
        self,
        config: SoapAssertConfig,
        http_session: requests.Session | None = None,
    ) -> None:
        self.config: SoapAssertConfig = config
        self.http_session: requests.Session = http_session or requests.Session()
        self.http_session.verify = config.client.verify_ssl

        self.history: HistoryPlugin = HistoryPlugin()
        self.transport: RecordingTransport = RecordingTransport(
            session=self.http_session,
            timeout=config.client.request_timeout,
            operation_timeout=config.client.request_timeout,
        )
        self._client: Client | None = None
        self._service: ServiceProxy | None = None

    @property
    def client(self) -> Client:
        """The zeep client, created from the WSDL on first access."""
        if self._client is None:
            wsdl: str = self.config.soap.wsdl
            logger.info('Loading WSDL from %r', wsdl)
            try:
                self._client = Client(wsdl, transport=self.transport, plugins=[self.history])
            except (requests.RequestException, ZeepError, etree.XMLSyntaxError, OSError) as e:
                logger.error('Failed to load WSDL %r: %r', wsdl, e)
                raise TransportError(f'Failed to load WSDL {wsdl!r}: {e}') from e
            logger.debug('WSDL loaded successfully')
        return self._client

    @property
    def service(self) -> ServiceProxy:
        """Service proxy, pointed at ``soap.endpoint_url`` when one is configured."""
        if self._service is None:
            service: ServiceProxy = self.client.service
            endpoint_url: str | None = self.config.soap.endpoint_url
            if endpoint_url:
                logger.info('Overriding service address with %r', endpoint_url)
                service = self.client.create_service(service._binding.name.text, endpoint_url)
            self._service = service
        return self._service

    def call(
        self,
        action: str,
        params: SoapParams,
        headers: Sequence[SoapHeader],
    ) -> SoapExchange:
        args, kwargs = _split_params(params)
        header_elements: list[etree._Element] = [header.to_element() for header in headers]
        operation: Any = self.service[action]

        self.transport.last_response = None
        logger.debug(
            'Calling %r with %d positional, %d keyword argument(s) and %d header(s)',
            action,
            len(args),
            len(kwargs),
            len(header_elements),
        )

        try:
            value: Any = operation(*args, _soapheaders=header_elements or None, **kwargs)
        except Fault as fault:
            # Faults are regular responses for assertion purposes
            logger.warning('SOAP Fault returned for %r: %s', action, fault.message)
            value = fault
        except requests.RequestException as e:
            logger.error('Network error for operation %r: %r', action, e)
            raise TransportError(f'SOAP call {action!r} failed: {e}', action) from e
        except ZeepXMLSyntaxError as e:
            raise ParseError(f'Response to {action!r} is not well-formed XML: {e}') from e
        except ZeepTransportError as e:
            if self.transport.last_response is not None:
                # The server answered, but not with an XML envelope
                raise ParseError(
                    f'Response to {action!r} (HTTP {e.status_code}) is not XML: {e}'
                ) from e
            logger.error('Transport error for operation %r: %r', action, e)
            raise TransportError(f'SOAP call {action!r} failed: {e}', action) from e

        http_response: requests.Response | None = self.transport.last_response
        if http_response is None:
            raise TransportError(f'No HTTP exchange was recorded for {action!r}', action)
        sent: dict[str, Any] = self.history.last_sent

        return SoapExchange(
            value=value,
            request_xml=etree.tostring(sent['envelope']),
            response_xml=http_response.content,
            response_headers=format_response_headers(http_response),
        )

    def close(self) -> None:
        logger.debug('Closing HTTP session')
        self.http_session.close()
