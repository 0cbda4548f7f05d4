# soapassert/__init__.py

from .errors import (
    ConfigurationError,
    ElementNotFound,
    ParseError,
    SelectorError,
    SoapAssertError,
    SoapAssertionFailure,
    StateError,
    TransportError,
)
from .headers import SoapHeader
from .session import SoapSession
from .transport import SoapExchange, SoapTransport, ZeepTransport

__all__: list[str] = [
    # errors.py
    'ConfigurationError',
    'ElementNotFound',
    'ParseError',
    'SelectorError',
    'SoapAssertError',
    'SoapAssertionFailure',
    'StateError',
    'TransportError',
    # headers.py
    'SoapHeader',
    # session.py
    'SoapSession',
    # transport.py
    'SoapExchange',
    'SoapTransport',
    'ZeepTransport',
]
