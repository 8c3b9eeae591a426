"""
Model Serializers
-----------------

Defines serializers for the various models in the system.
"""

from marshmallow import Schema, validates_schema, ValidationError
from marshmallow.fields import Integer, String, DateTime, Nested, List

from p2pvps.models import UserType
from p2pvps.service.proration import ProrationOutcome
from .fields import EnumField
from .services import DeviceLoginSchema


class UserSchema(Schema):
    """The schema corresponding to the :class:`~p2pvps.models.user.User` model."""

    id = Integer()
    username = String(required=True)
    password = String(required=True, load_only=True)
    name = String()
    type = EnumField(UserType)


class LoginSchema(Schema):
    username = String(required=True)
    password = String(required=True, load_only=True)


class DeviceSchema(Schema):
    id = Integer(required=True)
    owner_id = Integer(required=True)
    renter_id = Integer(allow_none=True)
    device_name = String(required=True)
    device_desc = String()
    ob_contract = String(allow_none=True)


class PaymentSchema(Schema):
    id = Integer()
    amount = Integer(required=True)
    pay_time = DateTime(required=True)
    refund_address = String(required=True)


class PaymentCreateSchema(Schema):
    """A payment as it is reported by the marketplace, at the time of purchase."""
    amount = Integer(required=True)
    purchase_time = DateTime(required=True)
    refund_address = String(required=True)

    @validates_schema
    def assert_positive_amount(self, data, **kwargs):
        if data["amount"] < 0:
            raise ValidationError("Payments can not be negative.", "amount")


class LedgerSchema(Schema):
    device_id = Integer(required=True)
    money_owed = Integer(required=True)
    payments = List(Nested(PaymentSchema()), required=True)


class RegistrationSchema(Schema):
    """The result of a device checking in."""
    device = Nested(DeviceSchema(), required=True)
    login = Nested(DeviceLoginSchema(), required=True)
    payments = EnumField(ProrationOutcome, required=True)
    ob_contract = String(required=True)
