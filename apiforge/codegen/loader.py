"""Document loading for interface description files.

This module turns a JSON or YAML file into a validated ``OpenAPI`` document
model. The decoder is chosen by file extension.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from apiforge.exceptions import DecodeError, UnsupportedExtensionError
from apiforge.openapi import OpenAPI

logger = logging.getLogger(__name__)

__all__ = ['DocumentLoader', 'parse_document']

JSON_EXTENSIONS = {'json'}
YAML_EXTENSIONS = {'yaml', 'yml'}


def parse_document(content: Any, source: str = '<document>') -> OpenAPI:
    """Validate an already-decoded document tree.

    Args:
        content: The decoded document (normally a dict).
        source: A label for the document used in error messages.

    Returns:
        The validated OpenAPI document model.

    Raises:
        DecodeError: If the tree does not have the expected document shape.
    """
    if not isinstance(content, dict):
        raise DecodeError(
            source, cause=TypeError('document root must be a mapping')
        )
    try:
        return OpenAPI.model_validate(content)
    except ValidationError as e:
        raise DecodeError(source, cause=e) from e


class DocumentLoader:
    """Loads interface description documents from local files.

    Example:
        >>> loader = DocumentLoader()
        >>> document = loader.load('./api.yaml')
        >>> sorted(document.paths)
        ['/pets', '/pets/{petId}']
    """

    def __init__(self, base_path: str | Path | None = None):
        """Initialize the loader.

        Args:
            base_path: Directory used to resolve relative paths.
                      Defaults to the current working directory.
        """
        self._base_path = Path(base_path) if base_path else Path.cwd()

    def load(self, source: str | Path) -> OpenAPI:
        """Load, decode and validate a document.

        Raises:
            UnsupportedExtensionError: If the extension selects no decoder.
            DecodeError: If the file is missing, unreadable or malformed.
        """
        path = Path(source)
        if not path.is_absolute():
            path = self._base_path / path

        content = self.decode(path)
        logger.debug(f'Decoded document {path}')
        return parse_document(content, str(source))

    def decode(self, path: Path) -> Any:
        """Decode a file into a generic document tree."""
        extension = path.suffix.lower().lstrip('.')
        if extension not in JSON_EXTENSIONS | YAML_EXTENSIONS:
            raise UnsupportedExtensionError(extension)

        if not path.exists():
            raise DecodeError(
                str(path), cause=FileNotFoundError(f'File not found: {path}')
            )

        try:
            text = path.read_text(encoding='utf-8')
            if extension in YAML_EXTENSIONS:
                return yaml.safe_load(text)
            return json.loads(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise DecodeError(str(path), cause=e) from e
        except OSError as e:
            raise DecodeError(str(path), cause=e) from e
