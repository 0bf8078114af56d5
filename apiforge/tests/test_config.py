"""Test configuration loading."""

import json

import pytest
import yaml

from apiforge.config import GeneratorConfig, get_config, load_file
from apiforge.exceptions import ConfigurationError


class TestGeneratorConfig:
    """Test the configuration model."""

    def test_defaults(self):
        """Test every option has a default."""
        config = GeneratorConfig()

        assert config.target == 'python'
        assert config.emit_models is True
        assert config.emit_routes is True
        assert config.output is None

    def test_unknown_target(self):
        """Test the target is validated."""
        with pytest.raises(ValueError):
            GeneratorConfig(target='cobol')


class TestLoadFile:
    """Test reading configuration files."""

    def test_yaml(self, tmp_path):
        """Test a YAML file is read as a mapping."""
        path = tmp_path / 'apiforge.yaml'
        path.write_text(yaml.safe_dump({'target': 'rust'}))

        assert load_file(path) == {'target': 'rust'}

    def test_json(self, tmp_path):
        """Test a JSON file is read as a mapping."""
        path = tmp_path / 'apiforge.json'
        path.write_text(json.dumps({'emit_routes': False}))

        assert load_file(path) == {'emit_routes': False}

    def test_empty_file(self, tmp_path):
        """Test an empty file is an empty mapping."""
        path = tmp_path / 'apiforge.yaml'
        path.write_text('')

        assert load_file(path) == {}

    def test_missing_file(self, tmp_path):
        """Test a missing file is reported with its path."""
        path = tmp_path / 'nope.yaml'

        with pytest.raises(ConfigurationError) as exc_info:
            load_file(path)

        assert exc_info.value.config_path == str(path)

    def test_not_a_mapping(self, tmp_path):
        """Test a list document is rejected."""
        path = tmp_path / 'apiforge.yaml'
        path.write_text('- python\n- rust\n')

        with pytest.raises(ConfigurationError, match='mapping'):
            load_file(path)

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON is a configuration error."""
        path = tmp_path / 'apiforge.json'
        path.write_text('{')

        with pytest.raises(ConfigurationError, match='Invalid configuration'):
            load_file(path)


class TestGetConfig:
    """Test configuration discovery."""

    def test_explicit_path(self, tmp_path):
        """Test an explicit path is used as is."""
        path = tmp_path / 'custom.yaml'
        path.write_text(yaml.safe_dump({'target': 'rust', 'output': 'out'}))

        config = get_config(str(path))
        assert config.target == 'rust'
        assert config.output == 'out'

    def test_invalid_value_names_field(self, tmp_path):
        """Test validation failures name the offending field."""
        path = tmp_path / 'custom.yaml'
        path.write_text(yaml.safe_dump({'target': 'cobol'}))

        with pytest.raises(ConfigurationError) as exc_info:
            get_config(str(path))

        assert exc_info.value.field == 'target'

    def test_defaults_without_files(self, tmp_path, monkeypatch):
        """Test the defaults apply when nothing is found."""
        monkeypatch.chdir(tmp_path)
        assert get_config() == GeneratorConfig()

    def test_default_filename(self, tmp_path, monkeypatch):
        """Test the default file names are discovered in order."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / 'apiforge.json').write_text(json.dumps({'target': 'python'}))
        (tmp_path / 'apiforge.yaml').write_text(yaml.safe_dump({'target': 'rust'}))

        assert get_config().target == 'rust'

    def test_pyproject_table(self, tmp_path, monkeypatch):
        """Test the pyproject tool table is used as a fallback."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / 'pyproject.toml').write_text(
            '[tool.apiforge]\ntarget = "rust"\nemit_routes = false\n'
        )

        config = get_config()
        assert config.target == 'rust'
        assert config.emit_routes is False

    def test_pyproject_without_table(self, tmp_path, monkeypatch):
        """Test a pyproject without the tool table yields defaults."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / 'pyproject.toml').write_text('[project]\nname = "demo"\n')

        assert get_config() == GeneratorConfig()
