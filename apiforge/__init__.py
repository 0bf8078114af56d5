"""apiforge - Compile OpenAPI documents into server-side code.

apiforge resolves an OpenAPI v3 document into an intermediate representation
(the Service): named models, parameters and operations split by location.
The Service is then rendered for a backend: pydantic models with a FastAPI
router, or serde structs with actix-web scaffolding.

Quick Start:
    >>> from apiforge import Codegen, GeneratorConfig
    >>>
    >>> codegen = Codegen('./api.yaml', GeneratorConfig(target='python'))
    >>> print(codegen.render())

CLI Usage:
    $ apiforge generate ./api.yaml
    $ apiforge generate ./api.yaml --target rust --output ./generated
"""

from importlib.metadata import PackageNotFoundError, version

from apiforge.codegen.codegen import Codegen
from apiforge.codegen.loader import DocumentLoader
from apiforge.codegen.service import ServiceBuilder
from apiforge.config import GeneratorConfig, get_config
from apiforge.exceptions import (
    ApiForgeError,
    CodeGenerationError,
    ConfigurationError,
    CycleError,
    DecodeError,
    DocumentError,
    DuplicateNameError,
    InvalidLocationError,
    MissingComponentsError,
    MissingFieldError,
    OperationBuildError,
    SchemaError,
    UnresolvedReferenceError,
    UnsupportedExtensionError,
)

__all__ = [
    # Main classes
    'Codegen',
    'DocumentLoader',
    'ServiceBuilder',
    # Configuration
    'GeneratorConfig',
    'get_config',
    # Exceptions
    'ApiForgeError',
    'DocumentError',
    'DecodeError',
    'UnsupportedExtensionError',
    'MissingComponentsError',
    'SchemaError',
    'MissingFieldError',
    'UnresolvedReferenceError',
    'InvalidLocationError',
    'DuplicateNameError',
    'CycleError',
    'CodeGenerationError',
    'OperationBuildError',
    'ConfigurationError',
]

try:
    __version__ = version('apiforge')
except PackageNotFoundError:
    __version__ = 'unknown'
