"""Pluggable renderers turning a Service into source text for one backend."""

from apiforge.codegen.emitter import CodeEmitter
from apiforge.codegen.targets.python import PythonEmitter
from apiforge.codegen.targets.rust import RustEmitter
from apiforge.exceptions import ConfigurationError

__all__ = ['PythonEmitter', 'RustEmitter', 'TARGETS', 'get_emitter_class']

TARGETS: dict[str, type[CodeEmitter]] = {
    PythonEmitter.target: PythonEmitter,
    RustEmitter.target: RustEmitter,
}


def get_emitter_class(target: str) -> type[CodeEmitter]:
    """Return the emitter class registered for a target name.

    Raises:
        ConfigurationError: If no emitter is registered under that name.
    """
    try:
        return TARGETS[target]
    except KeyError:
        choices = ', '.join(sorted(TARGETS))
        raise ConfigurationError(
            f"Unknown target '{target}' (choose from {choices})", field='target'
        ) from None
