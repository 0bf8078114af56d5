"""Test CLI functionality."""

import json
from unittest.mock import MagicMock, patch

import pytest
import yaml
from typer.testing import CliRunner

from apiforge.cli import app
from apiforge.config import GeneratorConfig
from apiforge.tests.fixtures import PETSTORE_SPEC, WIDGET_API_SPEC


@pytest.fixture
def runner():
    """Fixture providing CLI test runner."""
    return CliRunner()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Fixture providing an empty working directory without configuration."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def widget_file(workdir):
    """Fixture writing the widget document as JSON."""
    path = workdir / 'widget.json'
    path.write_text(json.dumps(WIDGET_API_SPEC))
    return path


class TestGenerateCommand:
    """Test the generate command."""

    def test_python_to_stdout(self, runner, widget_file):
        """Test the default target prints a python module."""
        result = runner.invoke(app, ['generate', str(widget_file)])

        assert result.exit_code == 0
        assert 'class GetWidgetInput(BaseModel):' in result.stdout
        assert 'router = APIRouter()' in result.stdout

    def test_rust_target(self, runner, widget_file):
        """Test the target option selects the rust emitter."""
        result = runner.invoke(app, ['generate', str(widget_file), '--target', 'rust'])

        assert result.exit_code == 0
        assert 'pub struct GetWidgetInput {' in result.stdout

    def test_no_routes(self, runner, widget_file):
        """Test route scaffolding can be disabled."""
        result = runner.invoke(app, ['generate', str(widget_file), '--no-routes'])

        assert result.exit_code == 0
        assert 'router' not in result.stdout

    def test_output_directory(self, runner, workdir):
        """Test files are written and listed when an output is given."""
        source = workdir / 'petstore.yaml'
        source.write_text(yaml.safe_dump(PETSTORE_SPEC))

        result = runner.invoke(
            app, ['generate', str(source), '-t', 'rust', '-o', str(workdir / 'out')]
        )

        assert result.exit_code == 0
        assert 'Generated files:' in result.stdout
        assert (workdir / 'out' / 'models.rs').exists()
        assert (workdir / 'out' / 'routes.rs').exists()
        assert (workdir / 'out' / 'mod.rs').exists()

    def test_config_file(self, runner, workdir, widget_file):
        """Test options are read from a configuration file."""
        config = workdir / 'custom.yaml'
        config.write_text(yaml.safe_dump({'target': 'rust', 'emit_routes': False}))

        result = runner.invoke(app, ['generate', str(widget_file), '-c', str(config)])

        assert result.exit_code == 0
        assert 'pub struct GetWidgetOutput {' in result.stdout
        assert 'cfg.route' not in result.stdout

    def test_options_override_config(self, runner, workdir, widget_file):
        """Test command line options win over the configuration file."""
        config = workdir / 'custom.yaml'
        config.write_text(yaml.safe_dump({'target': 'rust'}))

        result = runner.invoke(
            app, ['generate', str(widget_file), '-c', str(config), '-t', 'python']
        )

        assert result.exit_code == 0
        assert 'class GetWidgetOutput(BaseModel):' in result.stdout

    @patch('apiforge.cli.Codegen')
    def test_settings_passed_to_codegen(self, mock_codegen_class, runner, workdir):
        """Test the merged settings are handed to the generator."""
        mock_codegen_instance = MagicMock()
        mock_codegen_instance.generate.return_value = ''
        mock_codegen_class.return_value = mock_codegen_instance

        result = runner.invoke(app, ['generate', 'api.yaml', '-t', 'rust'])

        assert result.exit_code == 0
        mock_codegen_class.assert_called_once_with(
            'api.yaml', GeneratorConfig(target='rust')
        )
        mock_codegen_instance.generate.assert_called_once()


class TestGenerateErrors:
    """Test failures are reported and exit non-zero."""

    def test_unsupported_extension(self, runner, workdir):
        """Test an unknown extension fails with a message."""
        (workdir / 'api.txt').write_text('openapi: 3.0.0')

        result = runner.invoke(app, ['generate', str(workdir / 'api.txt')])

        assert result.exit_code == 1
        assert "Unsupported file extension 'txt'" in result.output

    def test_missing_document(self, runner, workdir):
        """Test a missing document fails with a decode error."""
        result = runner.invoke(app, ['generate', 'missing.json'])

        assert result.exit_code == 1
        assert 'Failed to decode document' in result.output

    def test_unknown_target(self, runner, widget_file):
        """Test an unknown target fails as a configuration error."""
        result = runner.invoke(app, ['generate', str(widget_file), '-t', 'cobol'])

        assert result.exit_code == 1
        assert "Unknown target 'cobol'" in result.output

    def test_structural_error(self, runner, workdir):
        """Test a broken operation fails the whole run."""
        document = {
            'openapi': '3.0.0',
            'paths': {
                '/things': {
                    'get': {
                        'operationId': 'GetThings',
                        'parameters': [
                            {'name': 's', 'in': 'cookie', 'schema': {'type': 'string'}}
                        ],
                    }
                }
            },
        }
        source = workdir / 'api.json'
        source.write_text(json.dumps(document))

        result = runner.invoke(app, ['generate', str(source)])

        assert result.exit_code == 1
        assert "Failed to build operation 'GetThings'" in result.output


class TestVersionCommand:
    """Test the version command."""

    def test_version(self, runner):
        """Test the version is printed."""
        result = runner.invoke(app, ['version'])

        assert result.exit_code == 0
        assert 'apiforge version:' in result.stdout
