"""Intermediate representation of a compiled interface document.

The IR is what every later stage consumes: the Service Builder produces it,
the Code Emitter renders it. All values are frozen dataclasses with
structural equality, so a Model can be compared, hashed and shared freely.
"""

import dataclasses
from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Optional

from apiforge.exceptions import UnresolvedReferenceError

__all__ = [
    'ModelKind',
    'Model',
    'Parameter',
    'OperationInput',
    'OperationOutput',
    'Operation',
    'Diagnostic',
    'Service',
    'PRIMITIVE_KINDS',
    'CONTAINER_KINDS',
]


class ModelKind(str, Enum):
    ANY = 'any'
    BOOLEAN = 'boolean'
    STRING = 'string'
    BYTE = 'byte'
    DATE = 'date'
    TIME = 'time'
    DATETIME = 'datetime'
    INT = 'int'
    INT8 = 'int8'
    INT16 = 'int16'
    INT32 = 'int32'
    INT64 = 'int64'
    UINT = 'uint'
    UINT8 = 'uint8'
    UINT16 = 'uint16'
    UINT32 = 'uint32'
    UINT64 = 'uint64'
    FLOAT32 = 'float32'
    FLOAT64 = 'float64'
    ARRAY = 'array'
    MAP = 'map'
    STRUCT = 'struct'
    ENUM = 'enum'
    ITERATOR = 'iterator'
    REFERENCE = 'reference'


PRIMITIVE_KINDS = frozenset(
    {
        ModelKind.ANY,
        ModelKind.BOOLEAN,
        ModelKind.STRING,
        ModelKind.BYTE,
        ModelKind.DATE,
        ModelKind.TIME,
        ModelKind.DATETIME,
        ModelKind.INT,
        ModelKind.INT8,
        ModelKind.INT16,
        ModelKind.INT32,
        ModelKind.INT64,
        ModelKind.UINT,
        ModelKind.UINT8,
        ModelKind.UINT16,
        ModelKind.UINT32,
        ModelKind.UINT64,
        ModelKind.FLOAT32,
        ModelKind.FLOAT64,
    }
)

# Kinds whose element is held indirectly (heap allocated or streamed).
CONTAINER_KINDS = frozenset({ModelKind.ARRAY, ModelKind.MAP, ModelKind.ITERATOR})


@dataclasses.dataclass(frozen=True)
class Model:
    """One node of the IR type graph.

    Only the fields relevant to ``kind`` are set: ``element`` for arrays,
    maps and iterators, ``properties`` for structs and ``name`` for
    references. Struct properties are an ordered tuple of ``(name, model)``
    pairs so that declaration order takes part in equality.
    """

    kind: ModelKind
    element: Optional['Model'] = None
    properties: tuple[tuple[str, 'Model'], ...] = ()
    name: str | None = None
    description: str | None = dataclasses.field(default=None, compare=False)

    @classmethod
    def primitive(cls, kind: ModelKind, description: str | None = None) -> 'Model':
        if kind not in PRIMITIVE_KINDS:
            raise ValueError(f'{kind.value} is not a primitive kind')
        return cls(kind=kind, description=description)

    @classmethod
    def any(cls) -> 'Model':
        return cls(kind=ModelKind.ANY)

    @classmethod
    def string(cls) -> 'Model':
        return cls(kind=ModelKind.STRING)

    @classmethod
    def byte(cls) -> 'Model':
        return cls(kind=ModelKind.BYTE)

    @classmethod
    def array(cls, element: 'Model', description: str | None = None) -> 'Model':
        return cls(kind=ModelKind.ARRAY, element=element, description=description)

    @classmethod
    def map(cls, element: 'Model', description: str | None = None) -> 'Model':
        return cls(kind=ModelKind.MAP, element=element, description=description)

    @classmethod
    def iterator(cls, element: 'Model') -> 'Model':
        return cls(kind=ModelKind.ITERATOR, element=element)

    @classmethod
    def byte_stream(cls) -> 'Model':
        """The model of a body that is read incrementally."""
        return cls.iterator(cls.byte())

    @classmethod
    def struct(
        cls,
        properties: Mapping[str, 'Model'] | Iterable[tuple[str, 'Model']] = (),
        description: str | None = None,
    ) -> 'Model':
        if isinstance(properties, Mapping):
            properties = properties.items()
        return cls(
            kind=ModelKind.STRUCT,
            properties=tuple(properties),
            description=description,
        )

    @classmethod
    def reference(cls, name: str) -> 'Model':
        return cls(kind=ModelKind.REFERENCE, name=name)

    @property
    def is_primitive(self) -> bool:
        return self.kind in PRIMITIVE_KINDS

    @property
    def is_struct(self) -> bool:
        return self.kind == ModelKind.STRUCT

    @property
    def is_reference(self) -> bool:
        return self.kind == ModelKind.REFERENCE

    @property
    def is_raw_payload(self) -> bool:
        """True for a String or Array<Byte> model, i.e. a raw request body."""
        if self.kind == ModelKind.STRING:
            return True
        return (
            self.kind == ModelKind.ARRAY
            and self.element is not None
            and self.element.kind == ModelKind.BYTE
        )

    def fields(self) -> dict[str, 'Model']:
        """Return struct properties as an (ordered) dict."""
        return dict(self.properties)

    def references(self) -> Iterator[str]:
        """Yield the name of every reference reachable inside this model."""
        if self.kind == ModelKind.REFERENCE:
            yield self.name
        if self.element is not None:
            yield from self.element.references()
        for _, prop in self.properties:
            yield from prop.references()

    def direct_references(self) -> Iterator[str]:
        """Yield the references not nested inside an array, map or iterator."""
        if self.kind == ModelKind.REFERENCE:
            yield self.name
        elif self.kind == ModelKind.STRUCT:
            for _, prop in self.properties:
                yield from prop.direct_references()


@dataclasses.dataclass(frozen=True)
class Parameter:
    name: str
    model: Model
    mandatory: bool = False
    description: str | None = dataclasses.field(default=None, compare=False)


@dataclasses.dataclass(frozen=True)
class OperationInput:
    path: tuple[Parameter, ...] = ()
    query: tuple[Parameter, ...] = ()
    header: tuple[Parameter, ...] = ()
    body: Model | None = None

    @property
    def parameters(self) -> tuple[Parameter, ...]:
        """Path, query and header parameters in that order."""
        return self.path + self.query + self.header


@dataclasses.dataclass(frozen=True)
class OperationOutput:
    status_code: int | None = None
    header: tuple[Parameter, ...] = ()
    body: Model | None = None


@dataclasses.dataclass(frozen=True)
class Operation:
    """A resolved operation, split by parameter location."""

    id: str
    method: str
    uri: str
    expect: tuple[int, ...] = ()
    input: OperationInput = dataclasses.field(default_factory=OperationInput)
    output: OperationOutput = dataclasses.field(default_factory=OperationOutput)
    summary: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True)
class Diagnostic:
    """A non-fatal anomaly found while building the Service.

    Attributes:
        category: A warning class describing the kind of anomaly.
        message: Human readable description.
        operation_id: The operation the anomaly belongs to, if any.
    """

    category: type[Warning]
    message: str
    operation_id: str | None = None

    def __str__(self) -> str:
        if self.operation_id:
            return f'{self.operation_id}: {self.message}'
        return self.message


@dataclasses.dataclass(frozen=True, eq=False)
class Service:
    """The fully resolved compilation unit of one document.

    ``models`` and ``parameters`` are read-only mappings; ``model_order``
    lists every model name dependencies-first.
    """

    models: Mapping[str, Model]
    parameters: Mapping[str, Parameter]
    operations: tuple[Operation, ...]
    diagnostics: tuple[Diagnostic, ...] = ()
    model_order: tuple[str, ...] = ()
    title: str | None = None
    version: str | None = None

    def __post_init__(self):
        object.__setattr__(self, 'models', MappingProxyType(dict(self.models)))
        object.__setattr__(
            self, 'parameters', MappingProxyType(dict(self.parameters))
        )
        object.__setattr__(self, 'operations', tuple(self.operations))
        object.__setattr__(self, 'diagnostics', tuple(self.diagnostics))
        object.__setattr__(self, 'model_order', tuple(self.model_order))

    def model(self, name: str) -> Model:
        """Look up a named model.

        Raises:
            UnresolvedReferenceError: If no model carries that name.
        """
        try:
            return self.models[name]
        except KeyError:
            raise UnresolvedReferenceError(name) from None

    def dereference(self, model: Model) -> Model:
        """Follow a reference one hop; any other model is returned unchanged."""
        if model.is_reference:
            return self.model(model.name)
        return model

    def operation(self, operation_id: str) -> Operation:
        for operation in self.operations:
            if operation.id == operation_id:
                return operation
        raise KeyError(operation_id)

    def structs(self) -> list[tuple[str, Model]]:
        """Return named struct models in dependency order."""
        order = self.model_order or tuple(self.models)
        return [
            (name, self.models[name]) for name in order if self.models[name].is_struct
        ]
