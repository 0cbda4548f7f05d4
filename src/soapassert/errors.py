# soapassert/errors.py
"""
Exception hierarchy for soapassert.

Two families live here:

- ``SoapAssertError`` and its subclasses signal that a step could not be
  carried out at all (bad configuration, transport failure, malformed XML,
  malformed selector, or a query issued before any SOAP call completed).
- ``SoapAssertionFailure`` subclasses ``AssertionError`` so that test
  runners report a violated ``see*``/``dont_see*`` check as a test failure
  rather than an error.
"""

from typing import Any


class SoapAssertError(Exception):
    """Base class for all non-assertion errors raised by soapassert."""


class ConfigurationError(SoapAssertError, ValueError):
    """Raised when the session configuration is missing or invalid."""


class TransportError(SoapAssertError):
    """
    Raised when a SOAP call could not be completed.

    Covers network failures and WSDL loading/parsing failures. A reply
    that arrived but is not XML is a :class:`ParseError` instead. The
    original exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, action: str | None = None) -> None:
        super().__init__(message)
        self.action: str | None = action


class ParseError(SoapAssertError, ValueError):
    """Raised when captured or user-supplied XML is not well-formed."""


class SelectorError(SoapAssertError, ValueError):
    """Raised when an XPath (or CSS) selector is syntactically invalid."""

    def __init__(self, message: str, selector: str) -> None:
        super().__init__(message)
        self.selector: str = selector


class StateError(SoapAssertError, RuntimeError):
    """Raised when response data is queried before any call has completed."""


class SoapAssertionFailure(AssertionError):
    """
    A ``see*``/``dont_see*`` condition did not hold.

    Attributes:
        expected: What the assertion was looking for (canonical XML,
                  selector text, status code...).
        actual: What was found instead, if meaningful.
    """

    def __init__(
        self,
        message: str,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        super().__init__(message)
        self.expected: Any = expected
        self.actual: Any = actual

    def __str__(self) -> str:
        lines: list[str] = [str(self.args[0])]
        if self.expected is not None:
            lines.append(f'   Expected: {self.expected!r}')
        if self.actual is not None:
            lines.append(f'   Actual:   {self.actual!r}')
        return '\n'.join(lines)


class ElementNotFound(SoapAssertionFailure):
    """No element in the response matched a selector or structure root."""
