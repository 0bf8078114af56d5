"""Test the Codegen orchestrator."""

import json
import logging

import pytest

from apiforge.codegen.codegen import Codegen
from apiforge.codegen.loader import parse_document
from apiforge.codegen.targets import PythonEmitter, RustEmitter
from apiforge.config import GeneratorConfig
from apiforge.exceptions import ConfigurationError, CycleError, OperationBuildError
from apiforge.tests.fixtures import (
    PETSTORE_SPEC,
    RECURSIVE_SPEC,
    WIDGET_API_SPEC,
    with_operation,
    with_schemas,
)


class TestSources:
    """Test the accepted document sources."""

    def test_dict_source(self):
        """Test a decoded tree is validated."""
        codegen = Codegen(WIDGET_API_SPEC)
        assert codegen.load().info.title == 'Widget API'

    def test_document_source(self):
        """Test a validated document is used as is."""
        document = parse_document(WIDGET_API_SPEC)
        assert Codegen(document).load() is document

    def test_path_source(self, tmp_path):
        """Test a file path is loaded from disk."""
        path = tmp_path / 'widget.json'
        path.write_text(json.dumps(WIDGET_API_SPEC))

        assert Codegen(path).load().info.title == 'Widget API'

    def test_service_is_built_once(self):
        """Test build results are cached."""
        codegen = Codegen(PETSTORE_SPEC)
        assert codegen.build() is codegen.build()


class TestRender:
    """Test rendering through the configured target."""

    def test_default_target(self):
        """Test python is the default target."""
        codegen = Codegen(WIDGET_API_SPEC)

        assert isinstance(codegen.emitter(), PythonEmitter)
        assert 'class GetWidgetInput(BaseModel):' in codegen.render()

    def test_rust_target(self):
        """Test the target option selects the emitter."""
        codegen = Codegen(WIDGET_API_SPEC, GeneratorConfig(target='rust'))

        assert isinstance(codegen.emitter(), RustEmitter)
        assert 'pub struct GetWidgetInput {' in codegen.render()

    def test_emit_flags(self):
        """Test emit flags reach the emitter."""
        config = GeneratorConfig(emit_models=False, emit_routes=False)
        source = Codegen(PETSTORE_SPEC, config).render()

        assert 'class Pet(BaseModel):' not in source
        assert 'APIRouter' not in source
        assert 'class ListPetsOutput(BaseModel):' in source

    def test_unknown_target(self):
        """Test an unvalidated target fails when the emitter is chosen."""
        config = GeneratorConfig().model_copy(update={'target': 'cobol'})

        with pytest.raises(ConfigurationError):
            Codegen(WIDGET_API_SPEC, config).render()


class TestGenerate:
    """Test generation to the configured output."""

    def test_generate_returns_text(self):
        """Test generation without an output returns the module."""
        result = Codegen(WIDGET_API_SPEC).generate()

        assert isinstance(result, str)
        assert result == Codegen(WIDGET_API_SPEC).render()

    def test_generate_writes_files(self, tmp_path):
        """Test generation with an output writes the target files."""
        config = GeneratorConfig(target='rust', output=str(tmp_path / 'out'))
        written = Codegen(PETSTORE_SPEC, config).generate()

        assert len(written) == 3
        assert (tmp_path / 'out' / 'models.rs').read_text().startswith('use ')

    def test_failure_writes_nothing(self, tmp_path):
        """Test a structural error leaves the output directory absent."""
        document = with_operation(
            {
                'operationId': 'GetThings',
                'parameters': [
                    {'name': 's', 'in': 'cookie', 'schema': {'type': 'string'}}
                ],
            }
        )
        config = GeneratorConfig(output=str(tmp_path / 'out'))

        with pytest.raises(OperationBuildError):
            Codegen(document, config).generate()

        assert not (tmp_path / 'out').exists()


class TestRecursion:
    """Test recursive documents through the whole pipeline."""

    @pytest.mark.parametrize('target', ['python', 'rust'])
    def test_recursive_structs_render(self, target):
        """Test self and mutually referring structs render on every target."""
        source = Codegen(RECURSIVE_SPEC, GeneratorConfig(target=target)).render()

        assert 'Node' in source
        assert 'GetNodeOutput' in source

    @pytest.mark.parametrize('target', ['python', 'rust'])
    def test_alias_recursion_is_a_cycle(self, target):
        """Test a map of itself fails with the model name instead of recursing."""
        document = with_schemas(
            {
                'Tree': {
                    'type': 'object',
                    'additionalProperties': {'$ref': '#/components/schemas/Tree'},
                },
                'Node': {
                    'type': 'object',
                    'properties': {'children': {'$ref': '#/components/schemas/Tree'}},
                },
            }
        )

        with pytest.raises(CycleError) as exc_info:
            Codegen(document, GeneratorConfig(target=target)).render()

        assert exc_info.value.path == ['Tree', 'Tree']


class TestLogging:
    """Test diagnostics are logged."""

    def test_duplicate_output_is_a_warning(self, caplog):
        """Test a duplicate output is logged at warning level."""
        body = {'application/json': {'schema': {'type': 'string'}}}
        document = with_operation(
            {
                'operationId': 'GetThings',
                'responses': {
                    '200': {'description': 'ok', 'content': body},
                    '201': {'description': 'created', 'content': body},
                },
            }
        )

        with caplog.at_level(logging.INFO, logger='apiforge'):
            Codegen(document).build()

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert 'GetThings' in warnings[0].getMessage()

    def test_ignored_responses_are_info(self, caplog):
        """Test ignored responses are logged at info level only."""
        with caplog.at_level(logging.INFO, logger='apiforge'):
            Codegen(WIDGET_API_SPEC).build()

        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert any('404' in r.getMessage() for r in caplog.records)
