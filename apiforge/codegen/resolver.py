"""Reference resolution for interface documents.

This module provides the ReferenceResolver class, which holds the component
namespaces of a document and resolves ``#/components/<section>/<name>``
pointers against them.
"""

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from apiforge.exceptions import (
    CycleError,
    MissingComponentsError,
    UnresolvedReferenceError,
)
from apiforge.openapi import (
    Header,
    OpenAPI,
    Parameter,
    RequestBody,
    Response,
    Schema,
)

logger = logging.getLogger(__name__)

__all__ = ['ReferenceResolver', 'ref_name', 'SECTIONS']

SECTIONS = ('schemas', 'parameters', 'responses', 'requestBodies', 'headers')

_Referable = TypeVar('_Referable', Parameter, RequestBody, Response, Header)


def ref_name(pointer: str) -> str:
    """Return the last ``/``-separated segment of a pointer.

    The section prefix is not checked; a pointer into the wrong
    section simply fails the subsequent lookup.

    Example:
        >>> ref_name('#/components/schemas/Widget')
        'Widget'
    """
    return pointer.rsplit('/', 1)[-1]


class ReferenceResolver:
    """Holds the component namespaces of a document and resolves pointers.

    Example:
        >>> resolver = ReferenceResolver(document)
        >>> resolver.lookup('schemas', '#/components/schemas/Widget')
        Schema(type=<Type.object: 'object'>, ...)
    """

    def __init__(self, document: OpenAPI):
        """Populate the namespaces from the document's components.

        Args:
            document: The validated document.
        """
        self.document = document
        self.has_components = document.components is not None
        self._namespaces: dict[str, dict[str, Any]] = {}

        for section in SECTIONS:
            entries = getattr(document.components, section, None) or {}
            self._namespaces[section] = dict(entries)
            if entries:
                logger.debug(f'Registered {len(entries)} component {section}')

    @property
    def schemas(self) -> Mapping[str, Schema]:
        return self._namespaces['schemas']

    @property
    def parameters(self) -> Mapping[str, Parameter]:
        return self._namespaces['parameters']

    @property
    def responses(self) -> Mapping[str, Response]:
        return self._namespaces['responses']

    @property
    def request_bodies(self) -> Mapping[str, RequestBody]:
        return self._namespaces['requestBodies']

    @property
    def headers(self) -> Mapping[str, Header]:
        return self._namespaces['headers']

    def namespace(self, section: str) -> Mapping[str, Any]:
        """Return the namespace of one component section.

        Raises:
            KeyError: If ``section`` is not a known component section.
        """
        return self._namespaces[section]

    def lookup(self, section: str, pointer: str, context: str | None = None) -> Any:
        """Resolve a pointer to the definition it names in ``section``.

        Args:
            section: The component section to search (e.g. ``schemas``).
            pointer: The raw pointer string.
            context: Where the pointer was found, used in error messages.

        Raises:
            MissingComponentsError: If the document declares no components.
            UnresolvedReferenceError: If the name is absent from the section.
        """
        if not self.has_components:
            raise MissingComponentsError(pointer)

        name = ref_name(pointer)
        try:
            return self._namespaces[section][name]
        except KeyError:
            raise UnresolvedReferenceError(pointer, context) from None

    def resolve(
        self, section: str, item: _Referable, context: str | None = None
    ) -> _Referable:
        """Follow ``$ref`` pointers of a referable object until a definition.

        Args:
            section: The component section the pointers point into.
            item: A parameter, request body, response or header.
            context: Where the object was found, used in error messages.

        Raises:
            CycleError: If a chain of pointers loops back on itself.
        """
        seen: list[str] = []
        while item.ref is not None:
            if item.ref in seen:
                raise CycleError(seen + [item.ref])
            seen.append(item.ref)
            item = self.lookup(section, item.ref, context)
        return item
