"""Pydantic models for the consulted subset of an OpenAPI v3 document.

Only the fields the compilation pipeline reads are declared; every other key
of the document is ignored. Objects that may be replaced by a reference carry
an optional ``ref`` field (``$ref`` in the document).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Type(Enum):
    array = 'array'
    boolean = 'boolean'
    integer = 'integer'
    number = 'number'
    object = 'object'
    string = 'string'


def _string_keys(data: Any) -> Any:
    # YAML reads unquoted keys such as 200 as integers
    if isinstance(data, dict):
        return {str(key): value for key, value in data.items()}
    return data


class _DocumentModel(BaseModel):
    model_config = ConfigDict(
        extra='ignore', populate_by_name=True, frozen=True, coerce_numbers_to_str=True
    )


class Info(_DocumentModel):
    title: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None


class Schema(_DocumentModel):
    ref: Optional[str] = Field(None, alias='$ref')
    type: Optional[Type] = None
    format: Optional[str] = None
    items: Optional[Schema] = None
    properties: Optional[Dict[str, Schema]] = None
    additionalProperties: Optional[Union[bool, Schema]] = None
    description: Optional[str] = None


class MediaType(_DocumentModel):
    schema_: Optional[Schema] = Field(None, alias='schema')


class Header(_DocumentModel):
    ref: Optional[str] = Field(None, alias='$ref')
    description: Optional[str] = None
    required: Optional[bool] = False
    schema_: Optional[Schema] = Field(None, alias='schema')


class Parameter(_DocumentModel):
    ref: Optional[str] = Field(None, alias='$ref')
    name: Optional[str] = None
    in_: Optional[str] = Field(None, alias='in')
    description: Optional[str] = None
    required: Optional[bool] = False
    style: Optional[str] = None
    schema_: Optional[Schema] = Field(None, alias='schema')


class RequestBody(_DocumentModel):
    ref: Optional[str] = Field(None, alias='$ref')
    description: Optional[str] = None
    content: Optional[Dict[str, MediaType]] = None
    required: Optional[bool] = False


class Response(_DocumentModel):
    ref: Optional[str] = Field(None, alias='$ref')
    description: Optional[str] = None
    headers: Optional[Dict[str, Header]] = None
    content: Optional[Dict[str, MediaType]] = None


class Operation(_DocumentModel):
    tags: Optional[List[str]] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    operationId: Optional[str] = None
    parameters: Optional[List[Parameter]] = None
    requestBody: Optional[RequestBody] = None
    responses: Optional[Dict[str, Response]] = None

    @field_validator('responses', mode='before')
    @classmethod
    def status_codes_as_strings(cls, data: Any) -> Any:
        return _string_keys(data)


class PathItem(_DocumentModel):
    summary: Optional[str] = None
    description: Optional[str] = None
    get: Optional[Operation] = None
    put: Optional[Operation] = None
    post: Optional[Operation] = None
    delete: Optional[Operation] = None
    options: Optional[Operation] = None
    head: Optional[Operation] = None
    patch: Optional[Operation] = None
    trace: Optional[Operation] = None
    parameters: Optional[List[Parameter]] = None

    def operations(self) -> list[tuple[str, Operation]]:
        """Return the declared operations in canonical method order."""
        return [
            (method, getattr(self, method))
            for method in HTTP_METHODS
            if getattr(self, method) is not None
        ]


class Components(_DocumentModel):
    schemas: Optional[Dict[str, Schema]] = None
    responses: Optional[Dict[str, Response]] = None
    parameters: Optional[Dict[str, Parameter]] = None
    requestBodies: Optional[Dict[str, RequestBody]] = None
    headers: Optional[Dict[str, Header]] = None


class OpenAPI(_DocumentModel):
    openapi: str
    info: Optional[Info] = None
    paths: Dict[str, PathItem] = Field(default_factory=dict)
    components: Optional[Components] = None

    @field_validator('paths', mode='before')
    @classmethod
    def paths_as_strings(cls, data: Any) -> Any:
        return _string_keys(data)


HTTP_METHODS = ['get', 'put', 'post', 'delete', 'options', 'head', 'patch', 'trace']


Schema.model_rebuild()
PathItem.model_rebuild()
OpenAPI.model_rebuild()
