from apiforge.openapi.v3 import (
    HTTP_METHODS,
    Components,
    Header,
    Info,
    MediaType,
    OpenAPI,
    Operation,
    Parameter,
    PathItem,
    RequestBody,
    Response,
    Schema,
    Type,
)

__all__ = [
    'HTTP_METHODS',
    'Components',
    'Header',
    'Info',
    'MediaType',
    'OpenAPI',
    'Operation',
    'Parameter',
    'PathItem',
    'RequestBody',
    'Response',
    'Schema',
    'Type',
]
