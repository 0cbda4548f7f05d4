# soapassert/utils/config_loader.py
"""
Configuration for SOAP test sessions.

The YAML file has three sections, each mirrored by a pydantic model:

    soap:                       # required
      wsdl: http://localhost:8000/users?wsdl
      schema_url: http://schemas.xmlsoap.org/soap/envelope/
      endpoint_url: null
    client:                     # optional
      request_timeout: [10, 30]
      verify_ssl: true
    logging:                    # optional
      console_level: INFO
      file_path: null
      file_level: null

Unknown keys are rejected so that a typo (``wsld:``) fails when the file is
loaded instead of silently falling back to a default. Schema violations
surface as :class:`~soapassert.errors.ConfigurationError`.
"""

import logging
from pathlib import Path
from typing import Annotated, Any, Literal, cast

import yaml
from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from ..errors import ConfigurationError

logger: logging.Logger = logging.getLogger(__name__)

# Namespace given to SOAP headers added without one
DEFAULT_SCHEMA_URL: str = 'http://schemas.xmlsoap.org/soap/envelope/'

LogLevelName = Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

_NUMERIC_LEVELS: frozenset[int] = frozenset(
    {logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL}
)


def _check_numeric_level(level: LogLevelName | int) -> LogLevelName | int:
    if isinstance(level, int) and level not in _NUMERIC_LEVELS:
        raise ValueError(
            f'Numeric log level must be one of {sorted(_NUMERIC_LEVELS)}, got {level}'
        )
    return level


# A level given by name ("DEBUG") or by its standard number (10)
LogLevel = Annotated[LogLevelName | int, AfterValidator(_check_numeric_level)]


def level_to_int(level: LogLevelName | int) -> int:
    """Translate a configured level into the number the logging module uses."""
    if isinstance(level, int):
        return level
    return cast(int, logging.getLevelName(level))


class SoapSection(BaseModel):
    """Where the service under test is described and reached."""

    model_config = ConfigDict(extra='forbid')

    wsdl: str = Field(
        ...,
        description='WSDL location: an http(s) URL or a local file path.',
    )
    schema_url: str = Field(
        default=DEFAULT_SCHEMA_URL,
        min_length=1,
        description='Namespace for headers added with have_soap_header() and no namespace.',
    )
    endpoint_url: str | None = Field(
        default=None,
        description='Send requests here instead of the address declared in the WSDL.',
    )

    @field_validator('wsdl')
    @classmethod
    def wsdl_not_blank(cls, v: str) -> str:
        location: str = v.strip()
        if not location:
            raise ValueError('wsdl cannot be empty')
        return location


class ClientSection(BaseModel):
    """HTTP settings shared by WSDL loading and SOAP calls."""

    model_config = ConfigDict(extra='forbid')

    request_timeout: tuple[float, float] = Field(
        default=(10.0, 30.0),
        description='[connect, read] timeouts in seconds.',
    )
    verify_ssl: bool = Field(
        default=True,
        description='Verify TLS certificates. Turn off only for self-signed test services.',
    )

    @field_validator('request_timeout')
    @classmethod
    def timeouts_are_ordered(cls, v: tuple[float, float]) -> tuple[float, float]:
        """Both timeouts must be positive and the connect timeout must not exceed the read timeout."""
        connect, read = v
        for label, seconds in (('Connect', connect), ('Read', read)):
            if seconds <= 0:
                raise ValueError(f'{label} timeout must be positive, got {seconds}')
        if connect > read:
            raise ValueError(
                f'Connect timeout ({connect}s) should not exceed read timeout ({read}s)'
            )
        return v


class LoggingSection(BaseModel):
    """
    Log destinations for the ``soapassert`` logger.

    The console always receives records at ``console_level``. Setting
    ``file_path`` adds a log file, at ``file_level`` or DEBUG when no level
    is given; DEBUG is where full request and response envelopes appear.
    """

    model_config = ConfigDict(extra='forbid')

    console_level: LogLevel = Field(
        default='INFO',
        description='Console level, by name (DEBUG ... CRITICAL) or number (10 ... 50).',
    )
    file_path: Path | None = Field(
        default=None,
        description='Log file; file logging is off while this is unset.',
    )
    file_level: LogLevel | None = Field(
        default=None,
        description='Level for the log file. Requires file_path.',
    )

    @model_validator(mode='after')
    def file_settings_consistent(self) -> 'LoggingSection':
        if self.file_path is None:
            if self.file_level is not None:
                raise ValueError(
                    'file_level is specified but file_path is missing. '
                    'Set file_path to enable file logging.'
                )
            return self

        if self.file_level is None:
            logger.warning('Logging file_path given without file_level, using DEBUG')
            self.file_level = 'DEBUG'
        return self

    def get_console_level_int(self) -> int:
        return level_to_int(self.console_level)

    def get_file_level_int(self) -> int | None:
        """Numeric file level, or None when file logging is off."""
        if self.file_level is None:
            return None
        return level_to_int(self.file_level)


class SoapAssertConfig(BaseModel):
    """
    Validated soapassert configuration.

    Usage:
        config = load_config('tests/soap.yaml')
        config.soap.wsdl
        config.client.request_timeout
    """

    model_config = ConfigDict(extra='forbid')

    soap: SoapSection
    client: ClientSection = Field(default_factory=ClientSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)

    @classmethod
    def from_mapping(cls, raw_config: dict[str, Any]) -> 'SoapAssertConfig':
        """
        Validate an already parsed configuration.

        Raises:
            ConfigurationError: If the mapping does not fit the schema; the
                                pydantic ``ValidationError`` is chained.
        """
        try:
            return cls.model_validate(raw_config)
        except ValidationError as e:
            logger.error('Invalid soapassert configuration: %s', e)
            raise ConfigurationError(f'Invalid soapassert configuration: {e}') from e


def _get_default_config_path() -> Path:
    """``config/config.yaml`` inside the installed soapassert package."""
    return Path(__file__).resolve().parent.parent / 'config' / 'config.yaml'


def load_config(config_path: Path | str | None = None) -> SoapAssertConfig:
    """
    Read and validate a YAML configuration file.

    Args:
        config_path: File to read. Falls back to the package's
                     ``config/config.yaml`` when omitted.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ConfigurationError: If the document is not a mapping or does not
                            fit the schema (for example ``soap.wsdl`` is
                            missing).
    """
    path: Path = Path(config_path) if config_path else _get_default_config_path()
    logger.debug('Reading soapassert configuration from %s', path)

    if not path.is_file():
        message: str = f'Configuration file not found at: {path}'
        logger.error(message)
        raise FileNotFoundError(message)

    try:
        with path.open(encoding='utf-8') as config_file:
            document: Any = yaml.safe_load(config_file)
    except yaml.YAMLError as e:
        logger.error('Could not parse %s as YAML: %s', path, e)
        raise

    if not isinstance(document, dict):
        raise ConfigurationError(
            f'Configuration file {path} must contain a mapping, '
            f'got {type(document).__name__}'
        )

    config: SoapAssertConfig = SoapAssertConfig.from_mapping(cast(dict[str, Any], document))
    logger.debug('Configuration for WSDL %r validated', config.soap.wsdl)
    return config
