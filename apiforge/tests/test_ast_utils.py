"""Test AST helpers and import collection."""

import ast

from apiforge.codegen.ast_utils import (
    ImportCollector,
    _all,
    _async_func,
    _argument,
    _name,
    _subscript,
    _union_expr,
)


def unparse(node) -> str:
    return ast.unparse(ast.fix_missing_locations(node))


class TestHelpers:
    """Test node builders."""

    def test_subscript_with_tuple(self):
        """Test a list of inner expressions becomes a tuple slice."""
        node = _subscript('dict', [_name('str'), _name('int')])
        assert unparse(node) == 'dict[str, int]'

    def test_union(self):
        """Test unions use the pipe operator."""
        node = _union_expr([_name('int'), _name('str'), ast.Constant(None)])
        assert unparse(node) == 'int | str | None'

    def test_all(self):
        """Test the export list."""
        assert unparse(_all(['Pet', 'router'])) == "__all__ = ['Pet', 'router']"

    def test_async_func(self):
        """Test an async stub with a default."""
        func = _async_func(
            'handler',
            [_argument('a', _name('int')), _argument('b', _name('str'))],
            [ast.Pass()],
            returns=_name('None'),
            defaults=[ast.Constant(None)],
        )
        module = ast.Module(body=[func], type_ignores=[])

        assert unparse(module).splitlines()[0] == (
            'async def handler(a: int, b: str=None) -> None:'
        )


class TestImportCollector:
    """Test import collection and ordering."""

    def test_categories_and_sorting(self):
        """Test __future__, stdlib, third-party and relative ordering."""
        collector = ImportCollector()
        collector.add_import('.models', 'Pet')
        collector.add_import('pydantic', 'Field')
        collector.add_import('pydantic', 'BaseModel')
        collector.add_import('typing', 'Any')
        collector.add_import('datetime', 'date')
        collector.add_import('__future__', 'annotations')
        collector.add_import('fastapi', 'APIRouter')

        module = ast.Module(body=collector.to_ast(), type_ignores=[])
        assert unparse(module).splitlines() == [
            'from __future__ import annotations',
            'from datetime import date',
            'from typing import Any',
            'from fastapi import APIRouter',
            'from pydantic import BaseModel, Field',
            'from .models import Pet',
        ]

    def test_add_imports_merges(self):
        """Test names for the same module are merged."""
        collector = ImportCollector()
        collector.add_imports({'typing': {'Any'}})
        collector.add_imports({'typing': {'Annotated'}, 'pydantic': {'Field'}})

        assert collector.get_modules() == {'typing', 'pydantic'}
        assert collector.has_imports()

    def test_empty(self):
        """Test a fresh collector has nothing to emit."""
        collector = ImportCollector()

        assert not collector.has_imports()
        assert collector.to_ast() == []
