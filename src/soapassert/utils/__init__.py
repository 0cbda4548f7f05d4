# soapassert/utils/__init__.py

from .config_loader import SoapAssertConfig, load_config
from .logger import setup_logger, setup_logger_from_config
from .templating import render_structured_value
from .xml_tools import (
    canonicalize,
    child_elements,
    find_soap_fault,
    parse_xml,
    qualified_name,
    to_xml,
)

__all__: list[str] = [
    # config_loader.py
    'SoapAssertConfig',
    # xml_tools.py
    'canonicalize',
    'child_elements',
    'find_soap_fault',
    'load_config',
    'parse_xml',
    'qualified_name',
    # templating.py
    'render_structured_value',
    # logger.py
    'setup_logger',
    'setup_logger_from_config',
    'to_xml',
]
