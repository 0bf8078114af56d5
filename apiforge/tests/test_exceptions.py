"""Test the exception hierarchy and messages."""

import pytest

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


class TestHierarchy:
    """Test every error is catchable through the base class."""

    @pytest.mark.parametrize(
        'error, parent',
        [
            (DecodeError('api.json'), DocumentError),
            (UnsupportedExtensionError('txt'), DocumentError),
            (MissingComponentsError('#/components/schemas/A'), DocumentError),
            (MissingFieldError('items'), SchemaError),
            (UnresolvedReferenceError('#/components/schemas/A'), SchemaError),
            (InvalidLocationError('cookie'), SchemaError),
            (DuplicateNameError('A', 'models'), SchemaError),
            (OperationBuildError('GetThings'), CodeGenerationError),
            (CycleError(['a', 'a']), ApiForgeError),
            (ConfigurationError('bad'), ApiForgeError),
        ],
    )
    def test_parent(self, error, parent):
        """Test each error derives from its category and the base."""
        assert isinstance(error, parent)
        assert isinstance(error, ApiForgeError)


class TestMessages:
    """Test the messages carry their context."""

    def test_decode_error(self):
        """Test the cause is appended to the message."""
        error = DecodeError('api.json', ValueError('bad token'))

        assert str(error) == "Failed to decode document 'api.json': bad token"
        assert error.message == str(error)

    def test_missing_field(self):
        """Test the schema path is included."""
        error = MissingFieldError('items', 'Widget.tags')
        assert str(error) == "Missing required field 'items' in 'Widget.tags'"

    def test_unresolved_reference(self):
        """Test the raw pointer and context are included."""
        error = UnresolvedReferenceError('#/components/schemas/Gone', 'listPets')

        assert '#/components/schemas/Gone' in str(error)
        assert 'listPets' in str(error)

    def test_invalid_location(self):
        """Test the location and parameter are named."""
        error = InvalidLocationError('cookie', 'session')
        assert str(error) == (
            "Invalid parameter location 'cookie' for parameter 'session'"
        )

    def test_cycle(self):
        """Test the path is joined with arrows."""
        error = CycleError(['A', 'B', 'A'])

        assert error.path == ['A', 'B', 'A']
        assert str(error) == 'Dependency cycle detected: A -> B -> A'

    def test_operation_build_error(self):
        """Test the route and cause are part of the message."""
        cause = InvalidLocationError('cookie', 'session')
        error = OperationBuildError('GetThings', 'get', '/things', cause=cause)

        assert error.cause is cause
        assert str(error) == (
            "Failed to build operation 'GetThings' (GET /things): "
            "Invalid parameter location 'cookie' for parameter 'session'"
        )

    def test_configuration_error(self):
        """Test path and field are appended."""
        error = ConfigurationError('Input should be a valid boolean', 'a.yaml', 'emit_models')

        assert str(error) == (
            "Input should be a valid boolean in 'a.yaml' (field: emit_models)"
        )
