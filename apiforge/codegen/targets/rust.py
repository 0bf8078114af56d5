"""Rust target: serde structs and actix-web route scaffolding."""

import logging
import re

from apiforge.codegen.emitter import CodeEmitter, Field
from apiforge.codegen.ir import Model, ModelKind, Operation
from apiforge.codegen.utils import sanitize_identifier, to_snake_case
from apiforge.exceptions import CodeGenerationError, DuplicateNameError

logger = logging.getLogger(__name__)

__all__ = ['RustEmitter', 'rust_field_name']

_PRIMITIVE_TYPES: dict[ModelKind, str] = {
    ModelKind.ANY: 'serde_json::Value',
    ModelKind.BOOLEAN: 'bool',
    ModelKind.STRING: 'String',
    ModelKind.BYTE: 'u8',
    ModelKind.DATE: 'chrono::NaiveDate',
    ModelKind.TIME: 'chrono::NaiveTime',
    ModelKind.DATETIME: 'chrono::DateTime<chrono::Utc>',
    ModelKind.INT: 'isize',
    ModelKind.INT8: 'i8',
    ModelKind.INT16: 'i16',
    ModelKind.INT32: 'i32',
    ModelKind.INT64: 'i64',
    ModelKind.UINT: 'usize',
    ModelKind.UINT8: 'u8',
    ModelKind.UINT16: 'u16',
    ModelKind.UINT32: 'u32',
    ModelKind.UINT64: 'u64',
    ModelKind.FLOAT32: 'f32',
    ModelKind.FLOAT64: 'f64',
}

RUST_KEYWORDS = frozenset(
    'as async await break const continue crate dyn else enum extern false fn for '
    'if impl in let loop match mod move mut pub ref return self static struct '
    'super trait true type unsafe use where while abstract become box do final '
    'macro override priv try typeof unsized virtual yield'.split()
)

# Keywords that cannot be used as raw identifiers either.
_RESERVED = frozenset({'crate', 'self', 'super', 'Self'})

_ROUTE_METHODS = {
    'get': 'web::get()',
    'put': 'web::put()',
    'post': 'web::post()',
    'delete': 'web::delete()',
    'head': 'web::head()',
    'patch': 'web::patch()',
    'trace': 'web::trace()',
    'options': 'web::method(actix_web::http::Method::OPTIONS)',
}

MODEL_DERIVES = '#[derive(Debug, Clone, Serialize, Deserialize)]'


def rust_field_name(name: str) -> str:
    """Turn a document name into a snake_case Rust identifier.

    Example:
        >>> rust_field_name('X-Rate-Limit')
        'x_rate_limit'
        >>> rust_field_name('type')
        'r#type'
    """
    snake = to_snake_case(name) or 'field'
    snake = re.sub(r'[^a-z0-9_]', '', snake)
    if snake[0].isdigit():
        snake = f'_{snake}'
    if snake in _RESERVED:
        return f'{snake}_'
    if snake in RUST_KEYWORDS:
        return f'r#{snake}'
    return snake


class RustEmitter(CodeEmitter):
    """Renders a Service as serde structs and an actix-web ``configure`` function.

    Example:
        >>> emitter = RustEmitter(service)
        >>> print(emitter.render_routes())
        pub fn configure(cfg: &mut web::ServiceConfig) {
            cfg.route("/widgets/{id}", web::get().to(get_widget));
        }
        ...
    """

    target = 'rust'
    extension = 'rs'

    def render_type(self, model: Model) -> str:
        kind = model.kind
        if kind in _PRIMITIVE_TYPES:
            return _PRIMITIVE_TYPES[kind]
        if kind == ModelKind.ARRAY:
            return f'Vec<{self.render_type(model.element)}>'
        if kind == ModelKind.MAP:
            return (
                f'std::collections::HashMap<String, {self.render_type(model.element)}>'
            )
        if kind == ModelKind.ITERATOR:
            if model.element.kind == ModelKind.BYTE:
                return 'web::Payload'
            return f'Box<dyn Iterator<Item = {self.render_type(model.element)}>>'
        if kind == ModelKind.REFERENCE:
            target = self.service.model(model.name)
            if target.is_struct:
                return sanitize_identifier(model.name)
            return self.render_type(target)

        raise CodeGenerationError(
            f'Cannot render an anonymous {kind.value} model', context='rust types'
        )

    def held_struct(self, model: Model) -> str | None:
        """Name of the struct a field stores inline, following aliases.

        Containers hold their elements on the heap, so a field typed as an
        array, map or iterator holds no struct inline.
        """
        while model.is_reference:
            target = self.service.model(model.name)
            if target.is_struct:
                return model.name
            model = target
        return None

    def is_recursive(self, owner: str, model: Model) -> bool:
        """Whether a field of ``owner`` leads back to ``owner`` by value.

        Such a field would give the struct an infinite size and is boxed.
        """
        start = self.held_struct(model)
        if start is None:
            return False
        pending = [start]
        seen: set[str] = set()
        while pending:
            name = pending.pop()
            if name == owner:
                return True
            if name in seen:
                continue
            seen.add(name)
            for _, prop in self.service.model(name).properties:
                held = self.held_struct(prop)
                if held is not None:
                    pending.append(held)
        return False

    def render_struct(
        self,
        name: str,
        fields: list[Field],
        derives: str | None = None,
        doc: str | None = None,
        owner: str | None = None,
    ) -> str:
        """Render a struct; recursive fields of the model ``owner`` are boxed."""
        lines = []
        if doc:
            lines.extend(f'/// {line}'.rstrip() for line in doc.splitlines())
        if derives:
            lines.append(derives)
        if not fields:
            lines.append(f'pub struct {name} {{}}')
            return '\n'.join(lines)

        lines.append(f'pub struct {name} {{')
        seen: set[str] = set()
        for field in fields:
            field_name = rust_field_name(field.name)
            if field_name in seen:
                raise DuplicateNameError(field_name, name)
            seen.add(field_name)
            if field.description:
                lines.append(f'    /// {field.description.splitlines()[0]}')
            if derives and field_name.removeprefix('r#') != field.name:
                lines.append(f'    #[serde(rename = "{field.name}")]')
            rendered = self.render_type(field.model)
            if owner is not None and self.is_recursive(owner, field.model):
                rendered = f'Option<Box<{rendered}>>'
            lines.append(f'    pub {field_name}: {rendered},')
        lines.append('}')
        return '\n'.join(lines)

    def render_models(self) -> str:
        blocks = []
        for name, model in self.model_structs():
            fields = [
                Field(prop, value, False, 'body', value.description)
                for prop, value in model.properties
            ]
            blocks.append(
                self.render_struct(
                    sanitize_identifier(name),
                    fields,
                    MODEL_DERIVES,
                    model.description,
                    owner=name,
                )
            )
        return '\n\n'.join(blocks)

    def render_input(self, operation: Operation) -> str:
        return self.render_struct(
            self.input_name(operation),
            self.input_fields(operation),
            doc=f'Input of {operation.id}.',
        )

    def render_output(self, operation: Operation) -> str:
        return self.render_struct(
            self.output_name(operation),
            self.output_fields(operation),
            doc=f'Output of {operation.id}.',
        )

    def handler_name(self, operation: Operation) -> str:
        return rust_field_name(operation.id)

    def render_handler(self, operation: Operation) -> str:
        name = self.handler_name(operation)
        return '\n'.join(
            [
                f'/// Handle {operation.method.upper()} {operation.uri}.',
                f'pub async fn {name}(req: HttpRequest, payload: web::Payload) '
                '-> HttpResponse {',
                '    let _ = (req, payload);',
                f'    unimplemented!("{operation.id}")',
                '}',
            ]
        )

    def render_routes(self) -> str:
        lines = ['pub fn configure(cfg: &mut web::ServiceConfig) {']
        handlers = []
        names: set[str] = set()
        for operation in self.service.operations:
            name = self.handler_name(operation)
            if name in names:
                raise DuplicateNameError(name, 'routes')
            names.add(name)
            route = _ROUTE_METHODS[operation.method]
            lines.append(f'    cfg.route("{operation.uri}", {route}.to({name}));')
            handlers.append(self.render_handler(operation))
        lines.append('}')
        return '\n\n'.join(['\n'.join(lines), *handlers])

    def _prelude(self, models: bool, routes: bool) -> str:
        uses = []
        if routes or any(
            f.model.kind == ModelKind.ITERATOR
            for operation in self.service.operations
            for f in self.input_fields(operation) + self.output_fields(operation)
        ):
            uses.append('use actix_web::{web, HttpRequest, HttpResponse};')
        if models:
            uses.append('use serde::{Deserialize, Serialize};')
        return '\n'.join(uses)

    def render_module(self) -> str:
        blocks = [self._prelude(self.emit_models, self.emit_routes)]
        blocks.extend(block for block in self.render_blocks() if block)
        if self.emit_routes:
            blocks.append(self.render_routes())
        return '\n\n'.join(block for block in blocks if block) + '\n'

    def render_files(self) -> dict[str, str]:
        model_blocks = [self._prelude(True, False)]
        model_blocks.extend(block for block in self.render_blocks() if block)
        files = {
            'models.rs': '\n\n'.join(b for b in model_blocks if b) + '\n',
        }
        modules = ['pub mod models;']
        if self.emit_routes:
            files['routes.rs'] = (
                'use actix_web::{web, HttpRequest, HttpResponse};\n\n'
                + self.render_routes()
                + '\n'
            )
            modules.append('pub mod routes;')
        files['mod.rs'] = '\n'.join(modules) + '\n'
        logger.debug(f'Rendered {len(files)} rust files')
        return files
