"""Config schema validation.

Azure treats storage SKU names case-insensitively ('standard_lrs' and
'Standard_LRS' name the same SKU), so the schema gets an extra
'case_insensitive_enum' keyword on top of Draft 7.
"""
import functools

import jsonschema


def case_insensitive_enum(validator, enums, instance, schema):
    del validator, schema  # Unused.
    if not isinstance(instance, str):
        yield jsonschema.ValidationError(
            f'{instance!r} is not a string; expected one of {enums!r}')
        return
    allowed = {enum.lower() for enum in enums}
    if instance.lower() not in allowed:
        yield jsonschema.ValidationError(
            f'{instance!r} is not one of {enums!r}')


@functools.lru_cache(maxsize=1)
def get_schema_validator():
    """Returns the Draft 7 validator class extended with azvm's keywords."""
    return jsonschema.validators.extend(
        jsonschema.Draft7Validator,
        validators={'case_insensitive_enum': case_insensitive_enum},
    )
