"""Python target: pydantic models and a FastAPI router.

Everything is assembled as ``ast`` nodes and unparsed, so the output is
always syntactically valid Python; the generated source is additionally
compiled before it is returned.
"""

import ast
import logging

from apiforge.codegen.ast_utils import (
    ImportCollector,
    _all,
    _argument,
    _assign,
    _async_func,
    _attr,
    _call,
    _docstring,
    _name,
    _subscript,
    _union_expr,
)
from apiforge.codegen.emitter import CodeEmitter, Field
from apiforge.codegen.ir import Model, ModelKind, Operation, Service
from apiforge.codegen.utils import (
    sanitize_field_name,
    sanitize_identifier,
    to_snake_case,
)
from apiforge.exceptions import CodeGenerationError, DuplicateNameError

logger = logging.getLogger(__name__)

__all__ = ['PythonEmitter']

_BUILTIN_TYPES: dict[ModelKind, str] = {
    ModelKind.BOOLEAN: 'bool',
    ModelKind.STRING: 'str',
    ModelKind.BYTE: 'int',
    ModelKind.INT: 'int',
    ModelKind.INT8: 'int',
    ModelKind.INT16: 'int',
    ModelKind.INT32: 'int',
    ModelKind.INT64: 'int',
    ModelKind.UINT: 'int',
    ModelKind.UINT8: 'int',
    ModelKind.UINT16: 'int',
    ModelKind.UINT32: 'int',
    ModelKind.UINT64: 'int',
    ModelKind.FLOAT32: 'float',
    ModelKind.FLOAT64: 'float',
}

_IMPORTED_TYPES: dict[ModelKind, tuple[str, str]] = {
    ModelKind.ANY: ('typing', 'Any'),
    ModelKind.DATE: ('datetime', 'date'),
    ModelKind.TIME: ('datetime', 'time'),
    ModelKind.DATETIME: ('datetime', 'datetime'),
}

_PARAM_FUNCTIONS = {'path': 'Path', 'query': 'Query', 'header': 'Header'}

_BODYLESS_CODES = frozenset({204, 205, 304})

ROUTER_NAME = 'router'
MODELS_MODULE = 'models'
ROUTES_MODULE = 'routes'


class PythonEmitter(CodeEmitter):
    """Renders a Service as pydantic models and FastAPI route stubs.

    Example:
        >>> emitter = PythonEmitter(service)
        >>> files = emitter.render_files()
        >>> sorted(files)
        ['__init__.py', 'models.py', 'routes.py']
    """

    target = 'python'
    extension = 'py'

    def __init__(
        self,
        service: Service,
        emit_models: bool = True,
        emit_routes: bool = True,
        validate_syntax: bool = True,
    ):
        super().__init__(service, emit_models, emit_routes)
        self.validate_syntax = validate_syntax

    # -- types ------------------------------------------------------------------

    def type_expr(
        self,
        model: Model,
        imports: ImportCollector,
        nominal: set[str] | None = None,
    ) -> ast.expr:
        """Build the annotation for a model.

        Args:
            model: The model to render.
            imports: Collector receiving the imports the annotation needs.
            nominal: If given, receives the names of referenced structs.

        Raises:
            CodeGenerationError: For inline structs and enums, which have no
                anonymous Python spelling.
        """
        kind = model.kind
        if kind in _BUILTIN_TYPES:
            return _name(_BUILTIN_TYPES[kind])
        if kind in _IMPORTED_TYPES:
            module, name = _IMPORTED_TYPES[kind]
            imports.add_import(module, name)
            return _name(name)

        if kind == ModelKind.ARRAY:
            if model.element.kind == ModelKind.BYTE:
                return _name('bytes')
            return _subscript('list', self.type_expr(model.element, imports, nominal))
        if kind == ModelKind.MAP:
            element = self.type_expr(model.element, imports, nominal)
            return _subscript('dict', [_name('str'), element])
        if kind == ModelKind.ITERATOR:
            imports.add_import('collections.abc', 'AsyncIterator')
            if model.element.kind == ModelKind.BYTE:
                return _subscript('AsyncIterator', _name('bytes'))
            return _subscript(
                'AsyncIterator', self.type_expr(model.element, imports, nominal)
            )
        if kind == ModelKind.REFERENCE:
            target = self.service.model(model.name)
            if target.is_struct:
                name = sanitize_identifier(model.name)
                if nominal is not None:
                    nominal.add(name)
                return _name(name)
            return self.type_expr(target, imports, nominal)

        raise CodeGenerationError(
            f'Cannot render an anonymous {kind.value} model', context='python types'
        )

    def render_type(self, model: Model) -> str:
        return ast.unparse(self.type_expr(model, ImportCollector()))

    # -- classes ----------------------------------------------------------------

    def _field(
        self,
        name: str,
        model: Model,
        mandatory: bool,
        imports: ImportCollector,
        description: str | None = None,
    ) -> tuple[ast.AnnAssign, bool]:
        annotation = self.type_expr(model, imports)
        keywords = []
        if not mandatory:
            annotation = _union_expr([annotation, ast.Constant(value=None)])
            keywords.append(ast.keyword(arg='default', value=ast.Constant(None)))

        field_name = sanitize_field_name(name)
        aliased = field_name != name
        if aliased:
            keywords.append(ast.keyword(arg='alias', value=ast.Constant(name)))
        if description:
            keywords.append(
                ast.keyword(arg='description', value=ast.Constant(description))
            )

        value = None
        if keywords:
            imports.add_import('pydantic', 'Field')
            value = _call(func=_name('Field'), keywords=keywords)

        statement = ast.AnnAssign(
            target=ast.Name(id=field_name, ctx=ast.Store()),
            annotation=annotation,
            value=value,
            simple=1,
        )
        return statement, aliased

    def _class(
        self,
        name: str,
        fields: list[Field],
        imports: ImportCollector,
        docstring: str | None = None,
    ) -> ast.ClassDef:
        body: list[ast.stmt] = []
        if docstring:
            body.append(_docstring(docstring))

        statements = []
        seen: set[str] = set()
        config: list[ast.keyword] = []
        for field in fields:
            statement, aliased = self._field(
                field.name, field.model, field.mandatory, imports, field.description
            )
            if statement.target.id in seen:
                raise DuplicateNameError(statement.target.id, name)
            seen.add(statement.target.id)
            statements.append(statement)

            if aliased and not any(k.arg == 'populate_by_name' for k in config):
                config.append(
                    ast.keyword(arg='populate_by_name', value=ast.Constant(True))
                )
            if field.model.kind == ModelKind.ITERATOR and not any(
                k.arg == 'arbitrary_types_allowed' for k in config
            ):
                config.append(
                    ast.keyword(arg='arbitrary_types_allowed', value=ast.Constant(True))
                )

        if config:
            imports.add_import('pydantic', 'ConfigDict')
            body.append(
                _assign(
                    _name('model_config'), _call(_name('ConfigDict'), keywords=config)
                )
            )
        body.extend(statements)

        imports.add_import('pydantic', 'BaseModel')
        return ast.ClassDef(
            name=name,
            bases=[_name('BaseModel')],
            keywords=[],
            body=body or [ast.Pass()],
            decorator_list=[],
            type_params=[],
        )

    def model_class(
        self, name: str, model: Model, imports: ImportCollector
    ) -> ast.ClassDef:
        """Build the pydantic class of a named struct model."""
        fields = [
            Field(prop, value, False, 'body', value.description)
            for prop, value in model.properties
        ]
        return self._class(
            sanitize_identifier(name), fields, imports, model.description
        )

    def input_class(self, operation: Operation, imports: ImportCollector) -> ast.ClassDef:
        return self._class(
            self.input_name(operation),
            self.input_fields(operation),
            imports,
            f'Input of {operation.id}.',
        )

    def output_class(
        self, operation: Operation, imports: ImportCollector
    ) -> ast.ClassDef:
        return self._class(
            self.output_name(operation),
            self.output_fields(operation),
            imports,
            f'Output of {operation.id}.',
        )

    # -- routes -----------------------------------------------------------------

    def handler_name(self, operation: Operation) -> str:
        return sanitize_field_name(to_snake_case(operation.id))

    def handler(
        self,
        operation: Operation,
        imports: ImportCollector,
        nominal: set[str] | None = None,
    ) -> ast.AsyncFunctionDef:
        """Build the async handler stub of one operation.

        Parameters carry FastAPI ``Path``/``Query``/``Header``/``Body`` markers;
        a raw payload body is exposed as the ``Request`` to stream from.
        """
        name = self.handler_name(operation)
        required: list[ast.arg] = []
        optional: list[ast.arg] = []
        seen: set[str] = set()

        def add(arg: ast.arg, mandatory: bool) -> None:
            if arg.arg in seen:
                raise DuplicateNameError(arg.arg, name)
            seen.add(arg.arg)
            (required if mandatory else optional).append(arg)

        for location, parameters in (
            ('path', operation.input.path),
            ('query', operation.input.query),
            ('header', operation.input.header),
        ):
            for parameter in parameters:
                arg_name = sanitize_field_name(parameter.name)
                keywords = []
                if arg_name != parameter.name:
                    keywords.append(
                        ast.keyword(arg='alias', value=ast.Constant(parameter.name))
                    )
                marker_name = _PARAM_FUNCTIONS[location]
                imports.add_import('fastapi', marker_name)
                annotation = self.type_expr(parameter.model, imports, nominal)
                if not parameter.mandatory:
                    annotation = _union_expr([annotation, ast.Constant(value=None)])
                imports.add_import('typing', 'Annotated')
                annotation = _subscript(
                    'Annotated',
                    [annotation, _call(_name(marker_name), keywords=keywords)],
                )
                add(_argument(arg_name, annotation), parameter.mandatory)

        body = operation.input.body
        if body is not None:
            if self.service.dereference(body).is_raw_payload:
                imports.add_import('fastapi', 'Request')
                add(_argument('request', _name('Request')), True)
            else:
                imports.add_import('fastapi', 'Body')
                imports.add_import('typing', 'Annotated')
                annotation = _subscript(
                    'Annotated',
                    [self.type_expr(body, imports, nominal), _call(_name('Body'))],
                )
                add(_argument('body', annotation), True)

        output_name = self.output_name(operation)
        if nominal is not None:
            nominal.add(output_name)

        doc = f'Handle {operation.method.upper()} {operation.uri}.'
        if operation.summary:
            doc = f'{operation.summary}\n\n{doc}'
        return _async_func(
            name=name,
            args=required + optional,
            body=[
                _docstring(doc),
                ast.Raise(
                    exc=_call(
                        _name('NotImplementedError'),
                        args=[ast.Constant(operation.id)],
                    ),
                    cause=None,
                ),
            ],
            returns=_name(output_name),
            defaults=[ast.Constant(None) for _ in optional],
        )

    def route_statements(self, imports: ImportCollector) -> list[ast.stmt]:
        """Build the router and one ``add_api_route`` call per operation."""
        imports.add_import('fastapi', 'APIRouter')
        statements: list[ast.stmt] = [
            _assign(_name(ROUTER_NAME), _call(_name('APIRouter')))
        ]
        for operation in self.service.operations:
            keywords = [
                ast.keyword(
                    arg='methods',
                    value=ast.List(
                        elts=[ast.Constant(operation.method.upper())], ctx=ast.Load()
                    ),
                ),
                ast.keyword(arg='operation_id', value=ast.Constant(operation.id)),
            ]
            status_code = operation.output.status_code
            if status_code is not None:
                keywords.append(
                    ast.keyword(arg='status_code', value=ast.Constant(status_code))
                )
                if status_code < 200 or status_code in _BODYLESS_CODES:
                    # FastAPI rejects a response model on these codes
                    keywords.append(
                        ast.keyword(arg='response_model', value=ast.Constant(None))
                    )
            if operation.tags:
                keywords.append(
                    ast.keyword(
                        arg='tags',
                        value=ast.List(
                            elts=[ast.Constant(tag) for tag in operation.tags],
                            ctx=ast.Load(),
                        ),
                    )
                )
            statements.append(
                ast.Expr(
                    value=_call(
                        _attr(ROUTER_NAME, 'add_api_route'),
                        args=[
                            ast.Constant(operation.uri),
                            _name(self.handler_name(operation)),
                        ],
                        keywords=keywords,
                    )
                )
            )
        return statements

    def _handlers(
        self, imports: ImportCollector, nominal: set[str] | None = None
    ) -> list[ast.stmt]:
        handlers: list[ast.stmt] = []
        names: set[str] = set()
        for operation in self.service.operations:
            handler = self.handler(operation, imports, nominal)
            if handler.name in names:
                raise DuplicateNameError(handler.name, 'routes')
            names.add(handler.name)
            handlers.append(handler)
        return handlers

    # -- modules ----------------------------------------------------------------

    def _docstring_text(self, what: str) -> str:
        title = self.service.title or 'API'
        if self.service.version:
            title = f'{title} {self.service.version}'
        return f'{what} for {title}, generated by apiforge.'

    def _model_classes(self, imports: ImportCollector) -> list[ast.ClassDef]:
        return [
            self.model_class(name, model, imports)
            for name, model in self.model_structs()
        ]

    def _operation_classes(self, imports: ImportCollector) -> list[ast.ClassDef]:
        classes = []
        for operation in self.service.operations:
            classes.append(self.input_class(operation, imports))
            classes.append(self.output_class(operation, imports))
        return classes

    def _unparse(
        self,
        body: list[ast.stmt],
        imports: ImportCollector | None = None,
        docstring: str | None = None,
        name: str = 'module',
    ) -> str:
        head: list[ast.stmt] = []
        if docstring:
            head.append(_docstring(docstring))
        if imports is not None:
            head.extend(imports.to_ast())

        module = ast.Module(body=head + body, type_ignores=[])
        ast.fix_missing_locations(module)
        source = ast.unparse(module) + '\n'

        if self.validate_syntax:
            try:
                compile(source, f'{name}.py', 'exec')
            except SyntaxError as e:
                raise CodeGenerationError(
                    'Generated code has invalid syntax', context=name, cause=e
                ) from e
        return source

    def _new_imports(self) -> ImportCollector:
        imports = ImportCollector()
        # models may refer to each other before their definition
        imports.add_import('__future__', 'annotations')
        return imports

    def render_models(self) -> str:
        imports = self._new_imports()
        classes = self._model_classes(imports)
        return self._unparse(
            classes, imports, self._docstring_text('Models'), MODELS_MODULE
        )

    def render_input(self, operation: Operation) -> str:
        return self._unparse([self.input_class(operation, ImportCollector())])

    def render_output(self, operation: Operation) -> str:
        return self._unparse([self.output_class(operation, ImportCollector())])

    def render_routes(self) -> str:
        """Render a routes module importing its types from the models module."""
        imports = self._new_imports()
        nominal: set[str] = set()
        body = self._handlers(imports, nominal) + self.route_statements(imports)
        if nominal:
            imports.add_imports({f'.{MODELS_MODULE}': nominal})
        return self._unparse(
            body + [_all([ROUTER_NAME])],
            imports,
            self._docstring_text('Routes'),
            ROUTES_MODULE,
        )

    def render_module(self) -> str:
        """Render models, operation structs and routes as one module."""
        imports = self._new_imports()
        body: list[ast.stmt] = []
        exports: list[str] = []

        if self.emit_models:
            classes = self._model_classes(imports)
            body.extend(classes)
            exports.extend(c.name for c in classes)

        classes = self._operation_classes(imports)
        body.extend(classes)
        exports.extend(c.name for c in classes)

        if self.emit_routes:
            body.extend(self._handlers(imports))
            body.extend(self.route_statements(imports))
            exports.append(ROUTER_NAME)

        body.append(_all(exports))
        return self._unparse(body, imports, self._docstring_text('API'), 'module')

    def render_files(self) -> dict[str, str]:
        imports = self._new_imports()
        body: list[ast.stmt] = []
        if self.emit_models:
            body.extend(self._model_classes(imports))
        body.extend(self._operation_classes(imports))
        exports = [c.name for c in body if isinstance(c, ast.ClassDef)]
        body.append(_all(exports))

        files = {
            '__init__.py': '',
            f'{MODELS_MODULE}.py': self._unparse(
                body, imports, self._docstring_text('Models'), MODELS_MODULE
            ),
        }
        if self.emit_routes:
            files[f'{ROUTES_MODULE}.py'] = self.render_routes()
        logger.debug(f'Rendered {len(files)} python files')
        return files
