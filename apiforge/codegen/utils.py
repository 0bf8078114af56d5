import keyword
import re
import unicodedata

__all__ = (
    'sanitize_identifier',
    'sanitize_field_name',
    'to_snake_case',
    'operation_id_from_route',
)

_SEPARATORS = re.compile(r'[-\s.]+')
_NON_IDENTIFIER = re.compile(r'[^A-Za-z0-9_]')
_NON_ALNUM = re.compile(r'[^A-Za-z0-9]+')


def _ascii(text: str) -> str:
    # decompose accented letters and drop the combining marks
    decomposed = unicodedata.normalize('NFKD', text)
    return ''.join(c for c in decomposed if not unicodedata.combining(c))


def _upper_first(word: str) -> str:
    return word[:1].upper() + word[1:]


def _avoid_leading_digit(name: str) -> str:
    return f'_{name}' if name[:1].isdigit() else name


def sanitize_field_name(name: str) -> str:
    """Turn a document name into a Python attribute or argument name.

    Separators become underscores, other invalid characters are dropped, a
    leading digit gets an underscore prefix and keywords (soft ones included)
    get an underscore suffix. Case is preserved.

    Raises:
        ValueError: If ``name`` is empty.
    """
    if not name:
        raise ValueError('Name cannot be empty')

    cleaned = _NON_IDENTIFIER.sub('', _SEPARATORS.sub('_', _ascii(name)))
    cleaned = _avoid_leading_digit(cleaned) or '_'
    if keyword.iskeyword(cleaned) or keyword.issoftkeyword(cleaned):
        return f'{cleaned}_'
    return cleaned


def sanitize_identifier(name: str) -> str:
    """Turn a document name into a PascalCase type name.

    Example:
        >>> sanitize_identifier('pet-tag')
        'PetTag'
    """
    words = [w for w in _NON_ALNUM.split(_ascii(name)) if w]
    return _avoid_leading_digit(''.join(_upper_first(w) for w in words)) or (
        'UnnamedType'
    )


def to_snake_case(name: str) -> str:
    """Convert camelCase, PascalCase or separated words to snake_case."""
    text = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', _ascii(name))
    text = re.sub(r'([a-z\d])([A-Z])', r'\1_\2', text)
    return _NON_ALNUM.sub('_', text).strip('_').lower()


def operation_id_from_route(method: str, uri: str) -> str:
    """Derive an operation id for an operation that declares none.

    Example:
        >>> operation_id_from_route('get', '/pets/{petId}')
        'GetPetsPetId'
    """
    return sanitize_identifier(f'{method}_{uri}')
