"""Utils shared between all of azvm."""
import difflib
import random
import secrets
import string
from typing import Any, Dict, Optional, Union

import jsonschema

from azvm import exceptions
from azvm.utils import ux_utils
from azvm.utils import validator

# Upper bound (exclusive) of the numeric suffix of generated resource names.
_RANDOM_NAME_SUFFIX_BOUND = 9999
_PASSWORD_LENGTH = 16
# Azure accepts these as the "special character" class of a VM password.
_PASSWORD_SPECIAL_CHARS = '!@#$%^&*()-_=+'


def make_random_name(prefix: str,
                     rng: Optional[random.Random] = None) -> str:
    """Returns prefix followed by a random number in [0, 9999).

    Example:
        >>> make_random_name('wVM')
        'wVM4711'
    """
    rng = rng if rng is not None else random
    return f'{prefix}{rng.randrange(_RANDOM_NAME_SUFFIX_BOUND)}'


def generate_admin_password(length: int = _PASSWORD_LENGTH) -> str:
    """Generates a password that satisfies Azure's VM password rules.

    Azure requires 12-123 characters with at least three of: a lowercase
    letter, an uppercase letter, a digit and a special character. We always
    include all four.
    """
    if length < 12:
        raise ValueError(f'Password length must be at least 12, got {length}.')
    classes = [
        string.ascii_lowercase, string.ascii_uppercase, string.digits,
        _PASSWORD_SPECIAL_CHARS
    ]
    chars = [secrets.choice(c) for c in classes]
    alphabet = ''.join(classes)
    chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return ''.join(chars)


def class_fullname(cls, skip_builtins: bool = True):
    """Get the full name of a class.

    Example:
        >>> e = azvm.exceptions.DataDiskAttachError('...')
        >>> class_fullname(e.__class__)
        'azvm.exceptions.DataDiskAttachError'

    Args:
        cls: The class to get the full name.

    Returns:
        The full name of the class.
    """
    module_name = getattr(cls, '__module__', '')
    if not module_name or (module_name == 'builtins' and skip_builtins):
        return cls.__name__
    return f'{cls.__module__}.{cls.__name__}'


def format_exception(e: Union[Exception, SystemExit, KeyboardInterrupt],
                     use_bracket: bool = False) -> str:
    """Format an exception to a string.

    Args:
        e: The exception to format.

    Returns:
        A string that represents the exception.
    """
    if use_bracket:
        return f'[{class_fullname(e.__class__)}] {e}'
    return f'{class_fullname(e.__class__)}: {e}'


def validate_schema(obj: Dict[str, Any],
                    schema: Dict[str, Any],
                    err_msg_prefix: str = '',
                    skip_none: bool = True) -> None:
    """Validates an object against a given JSON schema.

    Args:
        obj: The object to validate.
        schema: The JSON schema against which to validate the object.
        err_msg_prefix: The string to prepend to the error message if
          validation fails.
        skip_none: If True, removes fields with value None from the object
          before validation. yaml.safe_load() loads empty fields as None.

    Raises:
        InvalidAzvmConfigError: if the object does not match the schema.
    """
    if skip_none:
        obj = {k: v for k, v in obj.items() if v is not None}
    err_msg = None
    try:
        validator.get_schema_validator()(schema).validate(obj)
    except jsonschema.ValidationError as e:
        if e.validator == 'additionalProperties':
            err_msg = err_msg_prefix
            known_fields = set(e.schema.get('properties', {}).keys())
            for field in e.instance:
                if field not in known_fields:
                    most_similar_field = difflib.get_close_matches(
                        field, known_fields, 1)
                    if most_similar_field:
                        err_msg += (f'Instead of {field!r}, did you mean '
                                    f'{most_similar_field[0]!r}?')
                    else:
                        err_msg += f'Found unsupported field {field!r}.'
        else:
            message = e.message
            # Object in jsonschema is represented as dict in Python. Replace
            # 'object' with 'dict' for better readability.
            message = message.replace('type \'object\'', 'type \'dict\'')
            err_msg = (err_msg_prefix + message +
                       f'. Check problematic field(s): {e.json_path}')

    if err_msg:
        with ux_utils.print_exception_no_traceback():
            raise exceptions.InvalidAzvmConfigError(err_msg)
