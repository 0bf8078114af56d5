"""Code emitter interface shared by all targets.

A CodeEmitter renders a built Service into source text for one backend. The
base class owns the target independent rules: how operation inputs and
outputs are flattened into fields and in which order models are emitted.
Targets only decide how types, structs and routes are spelled.
"""

import dataclasses
import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from apiforge.codegen.ir import Model, Operation, Parameter, Service
from apiforge.codegen.utils import sanitize_identifier
from apiforge.exceptions import DuplicateNameError

logger = logging.getLogger(__name__)

__all__ = ['CodeEmitter', 'Field']

BODY_FIELD = 'body'


@dataclasses.dataclass(frozen=True)
class Field:
    """One field of a rendered Input or Output struct.

    Attributes:
        name: The field name as declared in the document.
        model: The field type.
        mandatory: Whether a value must always be present.
        location: ``path``, ``query``, ``header`` or ``body``.
    """

    name: str
    model: Model
    mandatory: bool
    location: str
    description: str | None = None


class CodeEmitter(ABC):
    """Abstract base class for target renderers.

    Subclasses set ``target`` and ``extension`` and implement the rendering
    hooks. Everything returns text so that output sinks stay target agnostic.

    Example:
        >>> emitter = PythonEmitter(service)
        >>> print(emitter.render_module())
    """

    target: ClassVar[str]
    extension: ClassVar[str]

    def __init__(
        self, service: Service, emit_models: bool = True, emit_routes: bool = True
    ):
        """Initialize the emitter.

        Args:
            service: The built Service to render.
            emit_models: Whether ``render_module`` includes model definitions.
            emit_routes: Whether ``render_module`` includes the route table.
        """
        self.service = service
        self.emit_models = emit_models
        self.emit_routes = emit_routes

    # -- target independent rules ---------------------------------------------

    def input_name(self, operation: Operation) -> str:
        return f'{sanitize_identifier(operation.id)}Input'

    def output_name(self, operation: Operation) -> str:
        return f'{sanitize_identifier(operation.id)}Output'

    def input_fields(self, operation: Operation) -> list[Field]:
        """Fields of the Input struct: path, query, header parameters, then body.

        Raises:
            DuplicateNameError: If two fields end up with the same name.
        """
        fields = [
            *self._parameter_fields(operation.input.path, 'path'),
            *self._parameter_fields(operation.input.query, 'query'),
            *self._parameter_fields(operation.input.header, 'header'),
            *self._body_fields(operation.input.body),
        ]
        return self._check_unique(fields, self.input_name(operation))

    def output_fields(self, operation: Operation) -> list[Field]:
        """Fields of the Output struct: header parameters, then body.

        Raises:
            DuplicateNameError: If two fields end up with the same name.
        """
        fields = [
            *self._parameter_fields(operation.output.header, 'header'),
            *self._body_fields(operation.output.body),
        ]
        return self._check_unique(fields, self.output_name(operation))

    def _parameter_fields(
        self, parameters: tuple[Parameter, ...], location: str
    ) -> list[Field]:
        return [
            Field(p.name, p.model, p.mandatory, location, p.description)
            for p in parameters
        ]

    def _body_fields(self, body: Model | None) -> list[Field]:
        if body is None:
            return []

        target = self.service.dereference(body)
        if target.is_raw_payload:
            # raw payloads are read incrementally
            return [Field(BODY_FIELD, Model.byte_stream(), True, 'body')]
        if target.is_struct:
            return [
                Field(name, model, False, 'body', model.description)
                for name, model in target.properties
            ]
        return [Field(BODY_FIELD, body, True, 'body', body.description)]

    def _check_unique(self, fields: list[Field], owner: str) -> list[Field]:
        seen: set[str] = set()
        for field in fields:
            if field.name in seen:
                raise DuplicateNameError(field.name, owner)
            seen.add(field.name)
        return fields

    def model_structs(self) -> list[tuple[str, Model]]:
        """Named struct models in dependency order."""
        return self.service.structs()

    # -- rendering hooks -------------------------------------------------------

    @abstractmethod
    def render_type(self, model: Model) -> str:
        """Render a type expression for a model."""

    @abstractmethod
    def render_models(self) -> str:
        """Render every named struct, dependencies first."""

    @abstractmethod
    def render_input(self, operation: Operation) -> str:
        """Render the Input struct of an operation."""

    @abstractmethod
    def render_output(self, operation: Operation) -> str:
        """Render the Output struct of an operation."""

    @abstractmethod
    def render_routes(self) -> str:
        """Render the route table and one handler stub per operation."""

    @abstractmethod
    def render_module(self) -> str:
        """Render a single self-contained module."""

    @abstractmethod
    def render_files(self) -> dict[str, str]:
        """Render the output as a mapping of file names to contents."""

    def render_operation(self, operation: Operation) -> str:
        """Render the Input and Output structs of one operation."""
        return '\n\n'.join(
            [self.render_input(operation), self.render_output(operation)]
        )

    def render_blocks(self) -> list[str]:
        """Render the model block followed by one block per operation."""
        blocks = []
        if self.emit_models:
            blocks.append(self.render_models())
        for operation in self.service.operations:
            logger.debug(f'Rendering operation {operation.id}')
            blocks.append(self.render_operation(operation))
        return blocks
