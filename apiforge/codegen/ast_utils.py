"""Small builders for ``ast`` nodes and the import block of generated modules.

The Python target assembles whole modules from these helpers and unparses
them, so every emitted file is syntactically valid by construction.
"""

import ast
import sys
from collections import defaultdict
from collections.abc import Iterable

__all__ = [
    '_name',
    '_attr',
    '_subscript',
    '_union_expr',
    '_argument',
    '_assign',
    '_call',
    '_async_func',
    '_docstring',
    '_all',
    'ImportCollector',
]


def _name(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def _attr(value: str | ast.expr, attr: str) -> ast.Attribute:
    if isinstance(value, str):
        value = _name(value)
    return ast.Attribute(value=value, attr=attr, ctx=ast.Load())


def _subscript(generic: str, inner: ast.expr | list[ast.expr]) -> ast.Subscript:
    """``generic[inner]``; a list of expressions becomes ``generic[a, b]``."""
    if isinstance(inner, list):
        inner = ast.Tuple(elts=inner, ctx=ast.Load())
    return ast.Subscript(value=_name(generic), slice=inner, ctx=ast.Load())


def _union_expr(types: list[ast.expr]) -> ast.expr:
    """Join annotations with ``|``."""
    if not types:
        raise ValueError('_union_expr requires at least one type')
    head, *rest = types
    for annotation in rest:
        head = ast.BinOp(left=head, op=ast.BitOr(), right=annotation)
    return head


def _argument(name: str, annotation: ast.expr | None = None) -> ast.arg:
    return ast.arg(arg=name, annotation=annotation)


def _assign(target: ast.Name | ast.Attribute, value: ast.expr) -> ast.Assign:
    if isinstance(target, ast.Name):
        target = ast.Name(id=target.id, ctx=ast.Store())
    else:
        target = ast.Attribute(value=target.value, attr=target.attr, ctx=ast.Store())
    return ast.Assign(targets=[target], value=value)


def _call(
    func: ast.expr,
    args: list[ast.expr] | None = None,
    keywords: list[ast.keyword] | None = None,
) -> ast.Call:
    return ast.Call(func=func, args=list(args or ()), keywords=list(keywords or ()))


def _async_func(
    name: str,
    args: list[ast.arg],
    body: list[ast.stmt],
    returns: ast.expr | None = None,
    defaults: list[ast.expr] | None = None,
) -> ast.AsyncFunctionDef:
    """An ``async def``; ``defaults`` apply to the trailing arguments."""
    arguments = ast.arguments(
        posonlyargs=[],
        args=args,
        kwonlyargs=[],
        kw_defaults=[],
        kwarg=None,
        defaults=list(defaults or ()),
    )
    return ast.AsyncFunctionDef(
        name=name,
        args=arguments,
        body=body,
        decorator_list=[],
        returns=returns,
        type_params=[],
    )


def _docstring(text: str) -> ast.Expr:
    return ast.Expr(value=ast.Constant(value=text))


def _all(names: Iterable[str]) -> ast.Assign:
    exported = ast.List(elts=[ast.Constant(value=n) for n in names], ctx=ast.Load())
    return _assign(_name('__all__'), exported)


# Section order of the import block.
FUTURE, STDLIB, THIRD_PARTY, LOCAL = range(4)


def _section(module: str) -> int:
    if module == '__future__':
        return FUTURE
    if module.startswith('.'):
        return LOCAL
    if module.partition('.')[0] in sys.stdlib_module_names:
        return STDLIB
    return THIRD_PARTY


class ImportCollector:
    """Accumulates ``from module import name`` pairs for one generated module.

    Names are deduplicated per module. ``to_ast`` orders the block by section
    (``__future__``, standard library, third party, relative) and then by
    module name, with names sorted inside each statement, so the output is
    the same however the imports were added.

    Example:
        >>> imports = ImportCollector()
        >>> imports.add_import('pydantic', 'BaseModel')
        >>> imports.add_import('__future__', 'annotations')
        >>> [node.module for node in imports.to_ast()]
        ['__future__', 'pydantic']
    """

    def __init__(self):
        self._imports: defaultdict[str, set[str]] = defaultdict(set)

    def add_import(self, module: str, name: str) -> None:
        self._imports[module].add(name)

    def add_imports(self, imports: dict[str, Iterable[str]]) -> None:
        """Merge a ``{module: names}`` mapping into the collector."""
        for module, names in imports.items():
            self._imports[module].update(names)

    def to_ast(self) -> list[ast.ImportFrom]:
        statements = []
        for module in sorted(self._imports, key=lambda m: (_section(m), m)):
            stripped = module.lstrip('.')
            statements.append(
                ast.ImportFrom(
                    module=stripped or None,
                    names=[ast.alias(name=n) for n in sorted(self._imports[module])],
                    level=len(module) - len(stripped),
                )
            )
        return statements

    def has_imports(self) -> bool:
        return bool(self._imports)

    def get_modules(self) -> set[str]:
        return set(self._imports)
