"""Per-operation extraction of inputs and outputs.

This module provides the OperationBuilder class, which walks the path table of
a document and turns every declared operation into an IR ``Operation``: its
parameters split by location, its request body and its single success output.
"""

import logging
from collections.abc import Mapping

from apiforge.codegen.ir import (
    Diagnostic,
    Model,
    Operation,
    OperationInput,
    OperationOutput,
    Parameter,
)
from apiforge.codegen.resolver import ReferenceResolver, ref_name
from apiforge.codegen.type_mapper import TypeMapper
from apiforge.codegen.utils import operation_id_from_route
from apiforge.exceptions import (
    ApiForgeError,
    DuplicateOutputWarning,
    IgnoredResponseWarning,
    InvalidLocationError,
    MissingFieldError,
    OperationBuildError,
    UnresolvedReferenceError,
)
from apiforge.openapi import (
    MediaType,
    Operation as DocumentOperation,
    Parameter as DocumentParameter,
    PathItem,
    Response,
)

logger = logging.getLogger(__name__)

__all__ = [
    'OperationBuilder',
    'build_parameter',
    'resolve_operation_id',
    'select_media_type',
]

LOCATIONS = ('path', 'query', 'header')
SUCCESS_CODES = range(100, 300)


def select_media_type(content: Mapping[str, MediaType] | None) -> MediaType | None:
    """Pick the lexicographically first media type of a content map."""
    if not content:
        return None
    return content[min(content)]


def resolve_operation_id(method: str, uri: str, operation: DocumentOperation) -> str:
    """The declared operationId, or one derived from method and URI."""
    return operation.operationId or operation_id_from_route(method, uri)


def build_parameter(
    parameter: DocumentParameter, mapper: TypeMapper, context: str
) -> Parameter:
    """Build an IR parameter from an inline document parameter.

    Path parameters are always mandatory.

    Raises:
        MissingFieldError: If the parameter has no name or no schema.
    """
    if not parameter.name:
        raise MissingFieldError('name', context)
    if parameter.schema_ is None:
        raise MissingFieldError('schema', f'{context}.{parameter.name}')

    model = mapper.map(parameter.schema_, f'{context}.{parameter.name}')
    return Parameter(
        name=parameter.name,
        model=model,
        mandatory=bool(parameter.required) or parameter.in_ == 'path',
        description=parameter.description,
    )


class OperationBuilder:
    """Builds IR operations from the path table of a document.

    Component schemas and parameters must already be compiled; the builder
    only looks them up. Non-fatal anomalies are collected in ``diagnostics``.

    Example:
        >>> builder = OperationBuilder(resolver, TypeMapper(), models, parameters)
        >>> operations = builder.build_all()
        >>> [op.id for op in operations]
        ['GetWidget', 'PutWidget']
    """

    def __init__(
        self,
        resolver: ReferenceResolver,
        mapper: TypeMapper,
        models: Mapping[str, Model],
        parameters: Mapping[str, Parameter],
    ):
        """Initialize the builder.

        Args:
            resolver: Resolver holding the document's component namespaces.
            mapper: Schema to model translator.
            models: Compiled component schemas, used for output dereferencing.
            parameters: Compiled component parameters, keyed by component name.
        """
        self.resolver = resolver
        self.mapper = mapper
        self.models = models
        self.parameters = parameters
        self.diagnostics: list[Diagnostic] = []

    def build_all(self) -> list[Operation]:
        """Build every operation, paths in sorted order, methods in canonical order."""
        operations = []
        paths = self.resolver.document.paths
        for uri in sorted(paths):
            path_item = paths[uri]
            for method, operation in path_item.operations():
                operations.append(self.build(uri, method, operation, path_item))
        logger.info(f'Built {len(operations)} operations')
        return operations

    def build(
        self,
        uri: str,
        method: str,
        operation: DocumentOperation,
        path_item: PathItem | None = None,
    ) -> Operation:
        """Build one operation.

        Raises:
            OperationBuildError: Wrapping any structural error, with the
                operation id, method and URI attached.
        """
        operation_id = resolve_operation_id(method, uri, operation)
        try:
            return self._build(operation_id, uri, method, operation, path_item)
        except ApiForgeError as e:
            raise OperationBuildError(operation_id, method, uri, cause=e) from e

    def _build(
        self,
        operation_id: str,
        uri: str,
        method: str,
        operation: DocumentOperation,
        path_item: PathItem | None,
    ) -> Operation:
        logger.debug(f'Building operation {operation_id} ({method.upper()} {uri})')

        shared = path_item.parameters if path_item else None
        split = self._parameters(operation_id, shared, operation.parameters)
        body = self._request_body(operation_id, operation)
        expect, output = self._responses(operation_id, operation)

        return Operation(
            id=operation_id,
            method=method,
            uri=uri,
            expect=expect,
            input=OperationInput(
                path=tuple(split['path']),
                query=tuple(split['query']),
                header=tuple(split['header']),
                body=body,
            ),
            output=output,
            summary=operation.summary,
            description=operation.description,
            tags=tuple(operation.tags or ()),
        )

    def _parameters(
        self,
        operation_id: str,
        shared: list[DocumentParameter] | None,
        declared: list[DocumentParameter] | None,
    ) -> dict[str, list[Parameter]]:
        # operation parameters override shared ones with the same (name, in)
        merged: dict[tuple[str | None, str | None], tuple[str, Parameter]] = {}
        for parameter in [*(shared or ()), *(declared or ())]:
            location, resolved = self._parameter(operation_id, parameter)
            merged[(resolved.name, location)] = (location, resolved)

        split: dict[str, list[Parameter]] = {location: [] for location in LOCATIONS}
        for location, parameter in merged.values():
            split[location].append(parameter)
        return split

    def _parameter(
        self, operation_id: str, parameter: DocumentParameter
    ) -> tuple[str, Parameter]:
        if parameter.ref is not None:
            definition = self.resolver.resolve('parameters', parameter, operation_id)
            name = ref_name(parameter.ref)
            if name not in self.parameters:
                raise UnresolvedReferenceError(parameter.ref, operation_id)
            resolved = self.parameters[name]
        else:
            definition = parameter
            resolved = build_parameter(parameter, self.mapper, operation_id)

        location = definition.in_
        if location not in LOCATIONS:
            raise InvalidLocationError(location, definition.name)
        return location, resolved

    def _request_body(
        self, operation_id: str, operation: DocumentOperation
    ) -> Model | None:
        if operation.requestBody is None:
            return None

        request_body = self.resolver.resolve(
            'requestBodies', operation.requestBody, operation_id
        )
        media_type = select_media_type(request_body.content)
        if media_type is None or media_type.schema_ is None:
            return None
        return self.mapper.map(media_type.schema_, f'{operation_id}.requestBody')

    def _responses(
        self, operation_id: str, operation: DocumentOperation
    ) -> tuple[tuple[int, ...], OperationOutput]:
        kept: dict[int, Response] = {}
        for key, response in (operation.responses or {}).items():
            if key == 'default':
                self._diagnose(
                    IgnoredResponseWarning,
                    "Ignoring 'default' response",
                    operation_id,
                )
                continue
            try:
                status_code = int(key)
            except ValueError:
                self._diagnose(
                    IgnoredResponseWarning,
                    f"Skipping non-numeric status code '{key}'",
                    operation_id,
                )
                continue
            if status_code not in SUCCESS_CODES:
                self._diagnose(
                    IgnoredResponseWarning,
                    f'Ignoring non-success response {status_code}',
                    operation_id,
                )
                continue
            kept[status_code] = response

        expect = tuple(sorted(kept))
        output: OperationOutput | None = None
        for status_code in expect:
            context = f'{operation_id}.responses.{status_code}'
            response = self.resolver.resolve('responses', kept[status_code], context)
            if not response.content and not response.headers:
                continue
            if output is not None:
                self._diagnose(
                    DuplicateOutputWarning,
                    f'Response {status_code} also declares content; '
                    f'keeping response {output.status_code}',
                    operation_id,
                )
                continue
            output = OperationOutput(
                status_code=status_code,
                header=self._response_headers(response, context),
                body=self._response_body(response, context),
            )

        if output is None:
            output = OperationOutput(status_code=expect[0] if expect else None)
        return expect, output

    def _response_headers(
        self, response: Response, context: str
    ) -> tuple[Parameter, ...]:
        headers = []
        for name, header in (response.headers or {}).items():
            header = self.resolver.resolve('headers', header, f'{context}.{name}')
            if header.schema_ is None:
                raise MissingFieldError('schema', f'{context}.headers.{name}')
            model = self.mapper.map(header.schema_, f'{context}.headers.{name}')
            headers.append(
                Parameter(
                    name=name,
                    model=self._dereference(model, context, structs=False),
                    mandatory=bool(header.required),
                    description=header.description,
                )
            )
        return tuple(headers)

    def _response_body(self, response: Response, context: str) -> Model | None:
        media_type = select_media_type(response.content)
        if media_type is None or media_type.schema_ is None:
            return None
        model = self.mapper.map(media_type.schema_, f'{context}.body')
        return self._dereference(model, context)

    def _dereference(self, model: Model, context: str, structs: bool = True) -> Model:
        if not model.is_reference:
            return model
        try:
            target = self.models[model.name]
        except KeyError:
            raise UnresolvedReferenceError(model.name, context) from None
        # a header keeps naming its struct, only bodies are flattened
        if target.is_struct and not structs:
            return model
        return target

    def _diagnose(
        self, category: type[Warning], message: str, operation_id: str
    ) -> None:
        diagnostic = Diagnostic(category, message, operation_id)
        self.diagnostics.append(diagnostic)
        if category is DuplicateOutputWarning:
            logger.warning(str(diagnostic))
        else:
            logger.info(str(diagnostic))
