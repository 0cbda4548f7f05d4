# soapassert/pytest_plugin.py
"""
pytest integration.

Registered through the ``pytest11`` entry point. Adds a ``--soap-config``
option (or ``soap_config`` ini value) naming the YAML configuration, and a
function-scoped ``soap_session`` fixture that gives every test a fresh
:class:`~soapassert.session.SoapSession`.

Example:
    # pytest.ini
    [pytest]
    soap_config = tests/soap.yaml

    # test_users.py
    def test_create_user(soap_session):
        soap_session.send_soap_request('CreateUser', {'name': 'davert'})
        soap_session.see_soap_response_contains_xpath('//user/id')
"""

import logging
from collections.abc import Iterator

import pytest

from .session import SoapSession
from .utils import SoapAssertConfig, load_config, setup_logger_from_config

logger: logging.Logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    group: pytest.OptionGroup = parser.getgroup('soapassert')
    group.addoption(
        '--soap-config',
        action='store',
        dest='soap_config',
        default=None,
        help='Path to the soapassert YAML configuration used by the soap_session fixture.',
    )
    parser.addini(
        'soap_config',
        help='Path to the soapassert YAML configuration used by the soap_session fixture.',
        default=None,
    )


def resolve_config_path(pytestconfig: pytest.Config) -> str | None:
    """Command-line option first, then the ini value; None means the default location."""
    return pytestconfig.getoption('soap_config') or pytestconfig.getini('soap_config') or None


@pytest.fixture(scope='session')
def soap_config(pytestconfig: pytest.Config) -> SoapAssertConfig:
    """The soapassert configuration, loaded once per test run; also applies its logging section."""
    config_path: str | None = resolve_config_path(pytestconfig)
    config: SoapAssertConfig = load_config(config_path)
    setup_logger_from_config(config)
    logger.debug('Loaded soapassert configuration for pytest from %r', config_path)
    return config


@pytest.fixture
def soap_session(soap_config: SoapAssertConfig) -> Iterator[SoapSession]:
    """A new SOAP session per test; headers and responses never leak between tests."""
    session: SoapSession = SoapSession(config=soap_config)
    yield session
    session.close()
