"""Code generation module for apiforge.

This module provides the main Codegen class that orchestrates the pipeline:
loading the document, building the Service and rendering it for a target.
"""

import logging
from pathlib import Path
from typing import Any

from apiforge.codegen.emitter import CodeEmitter
from apiforge.codegen.ir import Service
from apiforge.codegen.loader import DocumentLoader, parse_document
from apiforge.codegen.service import ServiceBuilder
from apiforge.codegen.targets import get_emitter_class
from apiforge.codegen.writer import FileEmitter, StringEmitter
from apiforge.config import GeneratorConfig
from apiforge.openapi import OpenAPI

logger = logging.getLogger(__name__)

__all__ = ['Codegen']


class Codegen:
    """Compiles one interface document into source code.

    Example:
        >>> codegen = Codegen('api.yaml', GeneratorConfig(target='rust'))
        >>> print(codegen.render())
    """

    def __init__(
        self,
        source: str | Path | dict[str, Any] | OpenAPI,
        config: GeneratorConfig | None = None,
    ):
        """Initialize the generator.

        Args:
            source: A document path, an already-decoded document tree, or a
                validated document model.
            config: Generation options. Defaults to ``GeneratorConfig()``.
        """
        self.source = source
        self.config = config or GeneratorConfig()
        self._document: OpenAPI | None = None
        self._service: Service | None = None

    def load(self) -> OpenAPI:
        """Load and validate the document (once)."""
        if self._document is None:
            if isinstance(self.source, OpenAPI):
                self._document = self.source
            elif isinstance(self.source, dict):
                self._document = parse_document(self.source)
            else:
                self._document = DocumentLoader().load(self.source)
            logger.info(f'Loaded document {self._source_label()}')
        return self._document

    def build(self) -> Service:
        """Build the Service (once)."""
        if self._service is None:
            self._service = ServiceBuilder(self.load()).build()
            for diagnostic in self._service.diagnostics:
                logger.debug(f'{diagnostic.category.__name__}: {diagnostic}')
        return self._service

    def emitter(self) -> CodeEmitter:
        """Create the emitter for the configured target."""
        emitter_class = get_emitter_class(self.config.target)
        return emitter_class(
            self.build(),
            emit_models=self.config.emit_models,
            emit_routes=self.config.emit_routes,
        )

    def render(self) -> str:
        """Render the whole output as one string."""
        return StringEmitter().emit(self.emitter())

    def generate(self) -> str | list[str]:
        """Render to the configured output.

        Returns:
            The written file paths when ``output`` is configured, otherwise
            the rendered source text.
        """
        emitter = self.emitter()
        if self.config.output:
            files = FileEmitter(self.config.output).emit(emitter)
            logger.info(f'Wrote {len(files)} files to {self.config.output}')
            return files
        return StringEmitter().emit(emitter)

    def _source_label(self) -> str:
        if isinstance(self.source, (str, Path)):
            return str(self.source)
        return '<document>'
