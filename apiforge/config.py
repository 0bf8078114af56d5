import json
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from apiforge.exceptions import ConfigurationError

DEFAULT_FILENAMES = ['apiforge.yaml', 'apiforge.yml', 'apiforge.json']


class GeneratorConfig(BaseModel):
    """Options controlling what is generated and where it goes."""

    target: Literal['python', 'rust'] = Field(
        'python', description='Backend the generated code is written for.'
    )

    emit_models: bool = Field(
        True, description='Whether to emit the named model definitions.'
    )

    emit_routes: bool = Field(
        True, description='Whether to emit route scaffolding and handler stubs.'
    )

    output: str | None = Field(
        None,
        description='Output directory for generated files. '
        'When unset, code is printed to standard output.',
    )


def load_file(path: str | Path) -> dict:
    path = Path(path)
    if not path.exists():
        raise ConfigurationError('Configuration file not found', str(path))

    try:
        text = path.read_text(encoding='utf-8')
        if path.suffix.lower() == '.json':
            content = json.loads(text)
        else:
            content = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f'Invalid configuration: {e}', str(path)) from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError('Configuration must be a mapping', str(path))
    return content


def _validate(content: dict, source: str) -> GeneratorConfig:
    try:
        return GeneratorConfig.model_validate(content)
    except ValidationError as e:
        error = e.errors()[0]
        field = '.'.join(str(part) for part in error['loc']) or None
        raise ConfigurationError(error['msg'], source, field) from e


def get_config(path: str | None = None) -> GeneratorConfig:
    """Load configuration from a file, or fall back to the defaults.

    Lookup order when no path is given: ``apiforge.yaml``, ``apiforge.yml``
    and ``apiforge.json`` in the working directory, then the
    ``[tool.apiforge]`` table of its ``pyproject.toml``.

    Raises:
        ConfigurationError: If a configuration exists but cannot be used.
    """
    if path:
        return _validate(load_file(path), path)

    cwd = Path(os.getcwd())

    for filename in DEFAULT_FILENAMES:
        candidate = cwd / filename
        if candidate.exists():
            return _validate(load_file(candidate), str(candidate))

    pyproject_path = cwd / 'pyproject.toml'

    if pyproject_path.exists():
        import tomllib

        try:
            pyproject = tomllib.loads(pyproject_path.read_text(encoding='utf-8'))
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(
                f'Invalid pyproject.toml: {e}', str(pyproject_path)
            ) from e
        tools = pyproject.get('tool', {})

        if 'apiforge' in tools:
            return _validate(tools['apiforge'], str(pyproject_path))

    return GeneratorConfig()
