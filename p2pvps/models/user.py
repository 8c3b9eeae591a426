"""
User
---------------------------
"""
from enum import Enum

from tortoise import Model, fields


class UserType(str, Enum):
    """We subclass string to make json serialization work."""
    USER = "user"
    ADMIN = "admin"


class User(Model):
    """
    Represents a User in the system.
    """

    id = fields.IntField(pk=True)
    username = fields.CharField(max_length=64, unique=True)
    password = fields.CharField(max_length=255)
    """The password hash. Never serialized."""

    name = fields.CharField(max_length=255, default="")
    type: UserType = fields.CharEnumField(UserType, default=UserType.USER)

    @property
    def is_admin(self) -> bool:
        return self.type == UserType.ADMIN

    def serialize(self):
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "type": self.type,
        }

    def __str__(self):
        return f"[{self.id}] {self.username}"
