"""Pytest configuration and shared fixtures for soapassert tests."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
import yaml

from soapassert import SoapExchange, SoapHeader, SoapSession, SoapTransport
from soapassert.transport import SoapParams
from soapassert.utils import SoapAssertConfig

FIXTURES_DIR: Path = Path(__file__).parent / 'fixtures'

SOAP_ENV: str = 'http://schemas.xmlsoap.org/soap/envelope/'


def soap_envelope(body: str, header: str = '') -> str:
    """Wrap body (and optional header) content in a SOAP 1.1 envelope."""
    header_block: str = f'<soapenv:Header>{header}</soapenv:Header>' if header else ''
    return (
        f'<soapenv:Envelope xmlns:soapenv="{SOAP_ENV}">'
        f'{header_block}<soapenv:Body>{body}</soapenv:Body>'
        f'</soapenv:Envelope>'
    )


@dataclass
class FakeReply:
    """A canned reply for FakeTransport."""

    response_xml: str
    response_headers: str = 'HTTP/1.1 200 OK\r\nContent-Type: text/xml; charset=utf-8'
    value: Any = None


class FakeTransport(SoapTransport):
    """In-memory transport: records calls and returns queued replies in order."""

    def __init__(self) -> None:
        self.replies: list[FakeReply | Exception] = []
        self.calls: list[tuple[str, SoapParams, tuple[SoapHeader, ...]]] = []
        self.closed: bool = False

    def reply(
        self,
        response_xml: str,
        response_headers: str = 'HTTP/1.1 200 OK\r\nContent-Type: text/xml; charset=utf-8',
        value: Any = None,
    ) -> None:
        self.replies.append(FakeReply(response_xml, response_headers, value))

    def fail(self, error: Exception) -> None:
        self.replies.append(error)

    def call(
        self,
        action: str,
        params: SoapParams,
        headers: Sequence[SoapHeader],
    ) -> SoapExchange:
        self.calls.append((action, params, tuple(headers)))
        reply: FakeReply | Exception = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply

        request_xml: str = soap_envelope(
            f'<{action}/>', ''.join(header.to_xml() for header in headers)
        )
        return SoapExchange(
            value=reply.value,
            request_xml=request_xml,
            response_xml=reply.response_xml,
            response_headers=reply.response_headers,
        )

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def wsdl_path() -> Path:
    """Path to the local test WSDL."""
    return FIXTURES_DIR / 'users.wsdl'


@pytest.fixture
def sample_config(wsdl_path: Path) -> SoapAssertConfig:
    """Create a sample SoapAssertConfig for testing."""
    config_dict: dict[str, Any] = {
        'soap': {
            'wsdl': str(wsdl_path),
            'schema_url': 'http://schemas.xmlsoap.org/soap/envelope/',
        },
        'client': {
            'request_timeout': [5, 10],
            'verify_ssl': True,
        },
        'logging': {
            'console_level': 'INFO',
        },
    }
    return SoapAssertConfig.model_validate(config_dict)


@pytest.fixture
def temp_config_file(tmp_path: Path, sample_config: SoapAssertConfig) -> Path:
    """Create a temporary config file for testing."""
    config_path: Path = tmp_path / 'config.yaml'
    config_dict: dict[str, Any] = sample_config.model_dump(mode='json')
    config_path.write_text(yaml.safe_dump(config_dict, sort_keys=False))
    return config_path


@pytest.fixture
def users_response() -> str:
    """A SOAP response listing two users."""
    return soap_envelope(
        '<ns:GetUsersResponse xmlns:ns="http://example.com/users">'
        '<users>'
        '<user id="1" role="admin"><name>Davert</name><email>davert@example.com</email></user>'
        '<user id="2"><name>Jon</name></user>'
        '</users>'
        '</ns:GetUsersResponse>'
    )


@pytest.fixture
def fault_response() -> str:
    """A SOAP 1.1 fault response."""
    return soap_envelope(
        '<soapenv:Fault>'
        '<faultcode>soapenv:Client</faultcode>'
        '<faultstring>User not found</faultstring>'
        '</soapenv:Fault>'
    )


@pytest.fixture
def fake_transport() -> FakeTransport:
    """An empty FakeTransport."""
    return FakeTransport()


@pytest.fixture
def session(sample_config: SoapAssertConfig, fake_transport: FakeTransport) -> SoapSession:
    """A SoapSession wired to the fake transport, before any call."""
    return SoapSession(config=sample_config, transport=fake_transport)


@pytest.fixture
def answered_session(
    session: SoapSession, fake_transport: FakeTransport, users_response: str
) -> SoapSession:
    """A SoapSession that has received users_response."""
    fake_transport.reply(users_response)
    session.send_soap_request('GetUsers')
    return session
