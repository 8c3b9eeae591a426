"""
Fields
-------
"""

from enum import Enum, IntEnum
from typing import Union, Optional, Type

from marshmallow import fields, ValidationError


class EnumField(fields.Field):
    """
    Serializes an :class:`~enum.Enum` by its value and back.

    Values that are already plain strings are passed through, so that
    dictionaries built from the wire format can be dumped again.
    """

    def __init__(self, enum_type: Type[Enum], *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not issubclass(enum_type, Enum):
            raise ValueError(f"Expected enum type, got {type(enum_type)} instead")
        self._enum_type = enum_type

    @property
    def choices(self):
        return [e.value for e in self._enum_type]

    def _serialize(self, value: Union[Enum, str], attr, obj, **kwargs):
        if isinstance(value, self._enum_type):
            return value.value
        if value in self.choices:
            return value
        return None

    def _deserialize(self, value: str, attr, data, **kwargs) -> Optional[Enum]:
        try:
            if issubclass(self._enum_type, IntEnum):
                return self._enum_type(int(value))
            return self._enum_type(value)
        except (ValueError, TypeError):
            raise ValidationError(f"Must be one of {', '.join(str(c) for c in self.choices)}.")

    def _jsonschema_type_mapping(self):
        """Defines the jsonschema type for the object."""
        return {
            'type': 'string',
            'enum': self.choices
        }
