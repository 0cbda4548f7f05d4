# soapassert/headers.py
"""
Pydantic model for SOAP headers queued on a session.

A header is a (namespace, name, value) triple. The value is any nested
scalar / mapping / list structure (pydantic's ``JsonValue``) and is turned
into XML by the structured value template when the request is built.
"""

from lxml import etree  # pyright: ignore[reportAttributeAccessIssue]
from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator

from .utils.templating import is_valid_xml_name, render_structured_value
from .utils.xml_tools import parse_xml


class SoapHeader(BaseModel):
    """
    A single SOAP header block.

    Attributes:
        namespace: Namespace URI of the header element.
        name: Element name, optionally prefixed (``wsse:Security``). An
              unprefixed name is bound to the namespace with a generated
              prefix.
        value: Header content. Mapping keys become unqualified child
               elements, lists under a key repeat that element, scalars
               become text and None renders ``xsi:nil="true"``.

    Example:
        >>> header = SoapHeader(
        ...     namespace='urn:auth',
        ...     name='Credentials',
        ...     value={'user': 'davert', 'roles': ['admin', 'qa']},
        ... )
        >>> header.to_xml()
        '<ns1:Credentials xmlns:ns1="urn:auth"><user>davert</user><roles>admin</roles><roles>qa</roles></ns1:Credentials>'
    """

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(..., min_length=1, description='Header namespace URI')
    name: str = Field(..., description='Header element name')
    value: JsonValue = Field(default=None, description='Structured header content')

    @field_validator('name')
    @classmethod
    def name_is_xml_name(cls, v: str) -> str:
        """Reject names that cannot be used as an XML element name."""
        if not is_valid_xml_name(v):
            raise ValueError(f'Invalid SOAP header name {v!r}')
        return v

    def to_xml(self) -> str:
        """Render the header block as XML text."""
        return render_structured_value(self.name, self.value, self.namespace)

    def to_element(self) -> etree._Element:
        """
        Render and parse the header block.

        Raises:
            ParseError: If the rendered XML is not well-formed.
            ValueError: If a mapping key is not a valid element name.
        """
        return parse_xml(self.to_xml())
