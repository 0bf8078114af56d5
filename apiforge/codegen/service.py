"""Assembly of a complete, validated Service from a document.

This module provides the ServiceBuilder class, which drives the Reference
Resolver, Type Mapper and Operation Builder, hoists every nested inline struct
into a named model, checks that all references resolve, and orders the
models dependencies-first.
"""

import dataclasses
import logging
from collections.abc import Mapping

from apiforge.algorithm import Topology
from apiforge.codegen.ir import (
    Model,
    Operation,
    OperationInput,
    OperationOutput,
    Parameter,
    Service,
)
from apiforge.codegen.operations import (
    OperationBuilder,
    build_parameter,
    resolve_operation_id,
)
from apiforge.codegen.resolver import ReferenceResolver
from apiforge.codegen.type_mapper import TypeMapper
from apiforge.codegen.utils import sanitize_identifier
from apiforge.exceptions import (
    ApiForgeError,
    DuplicateNameError,
    OperationBuildError,
    UnresolvedReferenceError,
)
from apiforge.openapi import OpenAPI

logger = logging.getLogger(__name__)

__all__ = ['ServiceBuilder', 'build_service', 'order_models']


def order_models(models: Mapping[str, Model]) -> list[str]:
    """Order model names so that each follows the models it refers to directly.

    References between structs are nominal, so structs may refer to each
    other in a cycle; such edges are skipped and the order is best effort.
    A non-struct model is spelled by expanding its references in place,
    so it must never reach itself through other non-struct models.

    Raises:
        CycleError: If a non-struct model expands into itself, for example an
            array whose items refer back to the array.
    """
    expansions: Topology[str] = Topology()
    for name, model in models.items():
        if model.is_struct:
            continue
        expansions.add_node(name)
        for target in model.references():
            if target in models and not models[target].is_struct:
                expansions.add_edge(name, target)
    expansions.sort_all()

    graph: Topology[str] = Topology()
    for name, model in models.items():
        graph.add_node(name)
        for target in model.direct_references():
            graph.add_edge(name, target)
    return graph.sort_all(break_cycles=True)


class _Hoister:
    """Replaces nested inline structs with references to named models.

    Hoisted names are built from the owner name and the property name
    (``Widget`` + ``owner`` gives ``WidgetOwner``). A structurally equal model
    already registered under that name is reused; when the name belongs to a
    different model or to a reserved class name, a numeric suffix is added
    (``WidgetOwner2``).
    """

    def __init__(
        self, models: dict[str, Model], reserved: frozenset[str] = frozenset()
    ):
        self.models = models
        self.reserved = reserved
        self._identifiers = {sanitize_identifier(name) for name in models}

    def register(self, name: str, model: Model) -> str:
        """Store a hoisted model and return the name it was stored under."""
        candidate = name
        counter = 1
        while True:
            existing = self.models.get(candidate)
            if existing == model:
                return candidate
            identifier = sanitize_identifier(candidate)
            if existing is None and not (
                identifier in self._identifiers or identifier in self.reserved
            ):
                break
            counter += 1
            candidate = f'{name}{counter}'

        if candidate != name:
            logger.debug(f'Name {name} is taken, hoisted inline struct as {candidate}')
        else:
            logger.debug(f'Hoisted inline struct as {candidate}')
        self.models[candidate] = model
        self._identifiers.add(identifier)
        return candidate

    def hoist(self, model: Model, name: str) -> Model:
        """Hoist ``model`` itself if it is a struct, otherwise its contents."""
        if model.is_struct:
            registered = self.register(name, self.hoist_properties(model, name))
            return Model.reference(registered)
        if model.element is not None:
            element = self.hoist(model.element, f'{name}Item')
            return dataclasses.replace(model, element=element)
        return model

    def hoist_properties(self, model: Model, name: str) -> Model:
        """Keep a top-level struct inline, hoisting the structs it contains."""
        properties = tuple(
            (prop, self.hoist(value, f'{name}{sanitize_identifier(prop)}'))
            for prop, value in model.properties
        )
        return dataclasses.replace(model, properties=properties)


class ServiceBuilder:
    """Builds a Service from a validated document.

    Example:
        >>> service = ServiceBuilder(document).build()
        >>> list(service.models)
        ['Widget', 'WidgetOwner']
    """

    def __init__(self, document: OpenAPI, mapper: TypeMapper | None = None):
        self.document = document
        self.resolver = ReferenceResolver(document)
        self.mapper = mapper or TypeMapper()

    def build(self) -> Service:
        """Compile the document into a Service.

        Raises:
            ApiForgeError: Any structural problem aborts the build.
        """
        reserved = self._operation_struct_names()
        models = self._build_models(reserved)
        hoister = _Hoister(models, reserved)
        parameters = self._build_parameters(hoister)

        builder = OperationBuilder(self.resolver, self.mapper, dict(models), parameters)
        operations = [
            self._hoist_operation(operation, hoister)
            for operation in builder.build_all()
        ]

        self._check_names(models, operations)
        self._check_references(models, parameters, operations)
        model_order = order_models(models)

        info = self.document.info
        service = Service(
            models=models,
            parameters=parameters,
            operations=operations,
            diagnostics=builder.diagnostics,
            model_order=model_order,
            title=info.title if info else None,
            version=info.version if info else None,
        )
        logger.info(
            f'Built service with {len(service.models)} models, '
            f'{len(service.parameters)} parameters and '
            f'{len(service.operations)} operations'
        )
        return service

    def _operation_struct_names(self) -> frozenset[str]:
        """Class names the emitters derive from operation ids."""
        names = set()
        for uri, path_item in self.document.paths.items():
            for method, operation in path_item.operations():
                base = sanitize_identifier(resolve_operation_id(method, uri, operation))
                names.update((f'{base}Input', f'{base}Output'))
        return frozenset(names)

    def _build_models(self, reserved: frozenset[str]) -> dict[str, Model]:
        models = {
            name: self.mapper.map(schema, name)
            for name, schema in self.resolver.schemas.items()
        }

        hoister = _Hoister(models, reserved)
        for name, model in list(models.items()):
            if model.is_struct:
                models[name] = hoister.hoist_properties(model, name)
            else:
                models[name] = hoister.hoist(model, name)
        return models

    def _build_parameters(self, hoister: _Hoister) -> dict[str, Parameter]:
        parameters: dict[str, Parameter] = {}
        for name, parameter in self.resolver.parameters.items():
            context = f'parameters.{name}'
            definition = self.resolver.resolve('parameters', parameter, context)
            built = build_parameter(definition, self.mapper, context)
            model = hoister.hoist(built.model, f'{sanitize_identifier(name)}Parameter')
            parameters[name] = dataclasses.replace(built, model=model)
        return parameters

    def _hoist_operation(self, operation: Operation, hoister: _Hoister) -> Operation:
        base = sanitize_identifier(operation.id)

        def hoist_all(parameters: tuple[Parameter, ...]) -> tuple[Parameter, ...]:
            return tuple(
                dataclasses.replace(
                    p, model=hoister.hoist(p.model, f'{base}{sanitize_identifier(p.name)}')
                )
                for p in parameters
            )

        try:
            body = operation.input.body
            if body is not None:
                body = hoister.hoist(body, f'{base}Request')

            output_body = operation.output.body
            if output_body is not None and output_body.is_struct:
                # the output is flattened, so only its nested structs get names
                output_body = hoister.hoist_properties(output_body, f'{base}Response')
            elif output_body is not None:
                output_body = hoister.hoist(output_body, f'{base}Response')

            return dataclasses.replace(
                operation,
                input=OperationInput(
                    path=hoist_all(operation.input.path),
                    query=hoist_all(operation.input.query),
                    header=hoist_all(operation.input.header),
                    body=body,
                ),
                output=OperationOutput(
                    status_code=operation.output.status_code,
                    header=hoist_all(operation.output.header),
                    body=output_body,
                ),
            )
        except ApiForgeError as e:
            raise OperationBuildError(
                operation.id, operation.method, operation.uri, cause=e
            ) from e

    def _check_names(
        self, models: Mapping[str, Model], operations: list[Operation]
    ) -> None:
        # distinct document names may still collide once turned into identifiers
        identifiers: dict[str, str] = {}
        for name in models:
            identifier = sanitize_identifier(name)
            if identifier in identifiers and identifiers[identifier] != name:
                raise DuplicateNameError(identifier, 'models')
            identifiers[identifier] = name

        seen: set[str] = set()
        for operation in operations:
            if operation.id in seen:
                raise DuplicateNameError(operation.id, 'operations')
            seen.add(operation.id)
            # a component schema may not take the name of an Input or Output class
            base = sanitize_identifier(operation.id)
            for struct_name in (f'{base}Input', f'{base}Output'):
                if struct_name in identifiers:
                    raise DuplicateNameError(struct_name, 'models')

    def _check_references(
        self,
        models: Mapping[str, Model],
        parameters: Mapping[str, Parameter],
        operations: list[Operation],
    ) -> None:
        def check(model: Model | None, context: str) -> None:
            if model is None:
                return
            for name in model.references():
                if name not in models:
                    raise UnresolvedReferenceError(name, context)

        for name, model in models.items():
            check(model, name)
        for name, parameter in parameters.items():
            check(parameter.model, f'parameters.{name}')

        for operation in operations:
            try:
                for parameter in operation.input.parameters:
                    check(parameter.model, f'{operation.id}.{parameter.name}')
                check(operation.input.body, f'{operation.id}.requestBody')
                for parameter in operation.output.header:
                    check(parameter.model, f'{operation.id}.{parameter.name}')
                check(operation.output.body, f'{operation.id}.response')
            except UnresolvedReferenceError as e:
                raise OperationBuildError(
                    operation.id, operation.method, operation.uri, cause=e
                ) from e


def build_service(document: OpenAPI) -> Service:
    """Convenience wrapper around ``ServiceBuilder(document).build()``."""
    return ServiceBuilder(document).build()

