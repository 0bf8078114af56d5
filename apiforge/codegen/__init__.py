"""The resolution-and-emission pipeline."""

from apiforge.codegen.codegen import Codegen
from apiforge.codegen.emitter import CodeEmitter, Field
from apiforge.codegen.ir import (
    Diagnostic,
    Model,
    ModelKind,
    Operation,
    OperationInput,
    OperationOutput,
    Parameter,
    Service,
)
from apiforge.codegen.loader import DocumentLoader, parse_document
from apiforge.codegen.operations import OperationBuilder
from apiforge.codegen.resolver import ReferenceResolver, ref_name
from apiforge.codegen.service import ServiceBuilder, build_service, order_models
from apiforge.codegen.targets import PythonEmitter, RustEmitter, get_emitter_class
from apiforge.codegen.type_mapper import TypeMapper
from apiforge.codegen.writer import FileEmitter, StringEmitter

__all__ = [
    'Codegen',
    'CodeEmitter',
    'Field',
    'Diagnostic',
    'Model',
    'ModelKind',
    'Operation',
    'OperationInput',
    'OperationOutput',
    'Parameter',
    'Service',
    'DocumentLoader',
    'parse_document',
    'OperationBuilder',
    'ReferenceResolver',
    'ref_name',
    'ServiceBuilder',
    'build_service',
    'order_models',
    'PythonEmitter',
    'RustEmitter',
    'get_emitter_class',
    'TypeMapper',
    'FileEmitter',
    'StringEmitter',
]
