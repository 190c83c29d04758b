"""
Fields
-------

Fields for the values in the API that marshmallow has no type for.
"""

from enum import Enum
from typing import Type, Optional

from marshmallow import fields, ValidationError


class EnumField(fields.Field):
    """
    A string field restricted to the values of an :class:`~enum.Enum`.
    Incoming values are matched regardless of case, so ``"ON"`` loads
    as ``RelayAction.ON``.
    """

    def __init__(self, enum_type: Type[Enum], *args, **kwargs):
        if not issubclass(enum_type, Enum):
            raise ValueError(f"Expected enum type, got {enum_type} instead")
        super().__init__(*args, **kwargs)
        self.enum_type = enum_type

    @property
    def choices(self):
        return [member.value for member in self.enum_type]

    def _serialize(self, value, attr, obj, **kwargs) -> Optional[str]:
        if value is None:
            return None
        return self.enum_type(value).value

    def _deserialize(self, value, attr, data, **kwargs) -> Enum:
        if isinstance(value, str):
            value = value.strip().lower()
        try:
            return self.enum_type(value)
        except ValueError:
            raise ValidationError(f"Must be one of: {', '.join(self.choices)}.")

    def _jsonschema_type_mapping(self):
        """The jsonschema shown to clients that send an invalid request."""
        return {
            'type': 'string',
            'enum': self.choices,
        }


def Many(schema):
    """A list of nested objects of the given schema."""
    return fields.List(fields.Nested(schema))
