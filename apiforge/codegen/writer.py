"""Output sinks for rendered code.

This module provides the StringEmitter, which returns rendered text, and the
FileEmitter, which writes the files of a target into an output directory.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from upath import UPath

from apiforge.codegen.emitter import CodeEmitter

logger = logging.getLogger(__name__)

__all__ = ['OutputSink', 'StringEmitter', 'FileEmitter']


class OutputSink(ABC):
    """Abstract base class for the destinations of rendered code."""

    @abstractmethod
    def emit(self, emitter: CodeEmitter) -> str | list[str]:
        """Render with ``emitter`` and deliver the result.

        Returns:
            The rendered text, or the paths of the written files, depending
            on the implementation.
        """
        pass


class StringEmitter(OutputSink):
    """Returns rendered code as a single string.

    This sink is what the CLI uses for standard output, and is handy in tests.
    """

    def __init__(self):
        self._outputs: list[str] = []

    def emit(self, emitter: CodeEmitter) -> str:
        """Render a single self-contained module.

        Returns:
            The generated source code as a string.
        """
        source = emitter.render_module()
        self._outputs.append(source)
        return source

    def get_outputs(self) -> list[str]:
        """Get every string emitted so far."""
        return self._outputs.copy()


class FileEmitter(OutputSink):
    """Writes the files of a target below an output directory.

    The directory may be any ``UPath`` location and is created on first
    write.
    """

    def __init__(self, output_dir: str | Path | UPath):
        self.output_dir = UPath(output_dir)
        self._written: list[str] = []

    def emit(self, emitter: CodeEmitter) -> list[str]:
        """Render every file of the target, then write them.

        Rendering happens before the first write, so a failing render leaves
        the output directory untouched.

        Returns:
            The written paths, in the order the target lists its files.
        """
        rendered = emitter.render_files()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        written = []
        for name, content in rendered.items():
            target = self.output_dir / name
            target.write_text(content, encoding='utf-8')
            logger.debug(f'Wrote {target}')
            written.append(str(target))
        self._written.extend(written)
        return written

    def get_written_files(self) -> list[str]:
        """Every path written by this sink so far."""
        return list(self._written)
