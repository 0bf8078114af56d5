"""Translation of document schemas into IR models."""

import logging

from apiforge.codegen.ir import Model, ModelKind
from apiforge.codegen.resolver import ref_name
from apiforge.exceptions import MissingFieldError
from apiforge.openapi import Schema, Type as DataType

logger = logging.getLogger(__name__)

__all__ = ['TypeMapper']

_FORMATTED_TYPES: dict[tuple[DataType, str | None], ModelKind] = {
    (DataType.integer, 'int32'): ModelKind.INT32,
    (DataType.integer, 'int64'): ModelKind.INT64,
    (DataType.number, 'double'): ModelKind.FLOAT64,
    (DataType.string, 'date'): ModelKind.DATE,
    (DataType.string, 'time'): ModelKind.TIME,
    (DataType.string, 'date-time'): ModelKind.DATETIME,
}

# Kind used when the format is absent or not listed above.
_DEFAULT_TYPES: dict[DataType, ModelKind] = {
    DataType.boolean: ModelKind.BOOLEAN,
    DataType.integer: ModelKind.INT,
    DataType.number: ModelKind.FLOAT32,
    DataType.string: ModelKind.STRING,
}


class TypeMapper:
    """Converts schema nodes into ``Model`` values.

    The mapping is pure: it keeps no state between calls, so mapping the same
    schema twice yields structurally equal models. A ``$ref`` becomes a
    nominal ``Reference`` and is never inlined.

    Example:
        >>> mapper = TypeMapper()
        >>> mapper.map(Schema(type='array', items=Schema(type='string')))
        Model(kind=<ModelKind.ARRAY: 'array'>, element=Model(kind=<ModelKind.STRING...
    """

    def map(self, schema: Schema, path: str = '<schema>') -> Model:
        """Map one schema node, recursively.

        Args:
            schema: The schema to translate.
            path: Dotted location of the schema, used in error messages
                  (for example ``Widget.tags``).

        Raises:
            MissingFieldError: If an array schema declares no ``items``.
        """
        if schema.ref is not None:
            return Model.reference(ref_name(schema.ref))

        if schema.type is None:
            return Model.primitive(ModelKind.ANY, schema.description)

        if schema.type == DataType.object:
            return self._map_object(schema, path)

        if schema.type == DataType.array:
            if schema.items is None:
                raise MissingFieldError('items', path)
            element = self.map(schema.items, f'{path}[]')
            return Model.array(element, schema.description)

        if schema.type == DataType.string and schema.format == 'binary':
            return Model.array(Model.byte(), schema.description)

        kind = _FORMATTED_TYPES.get((schema.type, schema.format))
        if kind is None:
            kind = _DEFAULT_TYPES[schema.type]
            if schema.format is not None:
                logger.debug(
                    f"Format '{schema.format}' of {path} has no dedicated model, "
                    f'using {kind.value}'
                )
        return Model.primitive(kind, schema.description)

    def _map_object(self, schema: Schema, path: str) -> Model:
        additional = schema.additionalProperties
        if not schema.properties and additional not in (None, False):
            if additional is True:
                element = Model.any()
            else:
                element = self.map(additional, f'{path}{{}}')
            return Model.map(element, schema.description)

        properties = [
            (name, self.map(prop, f'{path}.{name}'))
            for name, prop in (schema.properties or {}).items()
        ]
        return Model.struct(properties, schema.description)
