"""Custom exceptions for apiforge.

This module defines the hierarchy of exceptions raised while loading an
interface document, resolving it into a Service and rendering code from it.
Every structural problem aborts the compilation; non-fatal anomalies are
recorded as diagnostics instead (see ``DuplicateOutputWarning``).
"""


class ApiForgeError(Exception):
    """Base exception for all apiforge errors.

    All exceptions raised by apiforge inherit from this class, making it easy
    to catch every compilation failure with a single except clause.

    Example:
        try:
            codegen.generate()
        except ApiForgeError as e:
            print(f"apiforge error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class DocumentError(ApiForgeError):
    """Base exception for errors in the input document itself."""

    pass


class DecodeError(DocumentError):
    """The input document could not be decoded or has an invalid shape.

    Attributes:
        source: The path of the document that failed to decode.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, source: str, cause: Exception | None = None):
        self.source = source
        self.cause = cause
        message = f"Failed to decode document '{source}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class UnsupportedExtensionError(DocumentError):
    """The input file extension does not select any known decoder.

    Attributes:
        extension: The offending file extension (without the leading dot).
    """

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(
            f"Unsupported file extension '{extension}'. Expected json, yaml or yml"
        )


class MissingComponentsError(DocumentError):
    """A reference points into ``components`` but the document declares none.

    Attributes:
        reference: The pointer that needed the components section.
    """

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(
            f"Reference '{reference}' requires a components section, "
            'but the document declares none'
        )


class SchemaError(ApiForgeError):
    """Base exception for errors found while resolving schemas and operations."""

    pass


class MissingFieldError(SchemaError):
    """A field the pipeline depends on is absent.

    Attributes:
        field: Name of the missing field (e.g. ``items``).
        context: Where the field was expected (schema path, parameter name).
    """

    def __init__(self, field: str, context: str | None = None):
        self.field = field
        self.context = context
        message = f"Missing required field '{field}'"
        if context:
            message += f" in '{context}'"
        super().__init__(message)


class UnresolvedReferenceError(SchemaError):
    """A document-internal pointer names a definition that does not exist.

    Attributes:
        reference: The raw pointer string that could not be resolved.
        context: Where the pointer was encountered, if known.
    """

    def __init__(self, reference: str, context: str | None = None):
        self.reference = reference
        self.context = context
        message = f"Failed to resolve reference '{reference}'"
        if context:
            message += f" (in '{context}')"
        super().__init__(message)


class InvalidLocationError(SchemaError):
    """A parameter declares a location other than path, query or header.

    Attributes:
        location: The unrecognized location string.
        parameter: The parameter name.
    """

    def __init__(self, location: str | None, parameter: str | None = None):
        self.location = location
        self.parameter = parameter
        message = f"Invalid parameter location '{location}'"
        if parameter:
            message += f" for parameter '{parameter}'"
        super().__init__(message)


class DuplicateNameError(SchemaError):
    """Two definitions claim the same name within one namespace.

    Attributes:
        name: The clashing name.
        namespace: The namespace (``models``, ``parameters`` or a struct name).
    """

    def __init__(self, name: str, namespace: str):
        self.name = name
        self.namespace = namespace
        super().__init__(f"Duplicate name '{name}' in {namespace}")


class CycleError(ApiForgeError):
    """A dependency cycle prevents ordering definitions.

    Attributes:
        path: The traversal path, ending with the node that closed the cycle.
    """

    def __init__(self, path: list):
        self.path = list(path)
        joined = ' -> '.join(str(node) for node in self.path)
        super().__init__(f'Dependency cycle detected: {joined}')


class CodeGenerationError(ApiForgeError):
    """Error while building the Service or rendering code from it.

    Attributes:
        context: Additional context about what was being generated.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self, message: str, context: str | None = None, cause: Exception | None = None
    ):
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f'{message} (while generating {context})'
        if cause:
            full_message += f': {cause}'
        super().__init__(full_message)


class OperationBuildError(CodeGenerationError):
    """Error building one operation from the document.

    Attributes:
        operation_id: The operationId of the failing operation.
        method: The HTTP method of the operation.
        uri: The URI template of the operation.
    """

    def __init__(
        self,
        operation_id: str,
        method: str | None = None,
        uri: str | None = None,
        cause: Exception | None = None,
    ):
        self.operation_id = operation_id
        self.method = method
        self.uri = uri
        message = f"Failed to build operation '{operation_id}'"
        if method and uri:
            message += f' ({method.upper()} {uri})'
        super().__init__(message, cause=cause)


class ConfigurationError(ApiForgeError):
    """Error in configuration.

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)


class DuplicateOutputWarning(UserWarning):
    """An operation declares more than one success response with content.

    Used as the category of the corresponding non-fatal diagnostic.
    """

    pass


class IgnoredResponseWarning(UserWarning):
    """A declared response was left out of the operation output.

    Covers the ``default`` response, error status codes and keys that are
    not status codes at all.
    """

    pass
