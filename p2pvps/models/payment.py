"""
Payment
---------------------------
"""
from datetime import datetime

from tortoise import Model, fields


class Payment(Model):
    """
    A single rental period payment made by a renter.

    .. note:: ``pay_time`` is the time the rental period *expires* and the
        payment becomes due to the device owner, not the time of purchase.
    """

    id = fields.IntField(pk=True)
    device = fields.ForeignKeyField("models.DevicePrivateData", related_name="payments")
    amount = fields.BigIntField()
    """The amount paid (in satoshis)."""

    pay_time: datetime = fields.DatetimeField()
    refund_address = fields.CharField(max_length=255)

    class Meta:
        ordering = ["pay_time", "id"]
