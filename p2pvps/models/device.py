"""
Device
-------------------------

A device is a machine that its owner (the lessor) rents out through the
marketplace. The public half of the device is what gets listed, and the
private half holds the login details handed to the renter (the lessee)
along with the device's payment ledger.
"""
from typing import Dict, Any

from tortoise import Model, fields


class DevicePublicData(Model):
    id = fields.IntField(pk=True)
    owner = fields.ForeignKeyField("models.User", related_name="devices")
    renter = fields.ForeignKeyField("models.User", related_name="rentals", null=True)

    device_name = fields.CharField(max_length=255)
    device_desc = fields.TextField(default="")

    ob_contract = fields.CharField(max_length=64, null=True)
    """The id of the ob-contract backing the current market listing."""

    rent_start_date = fields.DatetimeField(null=True)
    expiration = fields.DatetimeField(null=True)

    def serialize(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "renter_id": self.renter_id,
            "device_name": self.device_name,
            "device_desc": self.device_desc,
            "ob_contract": self.ob_contract,
        }

    def __str__(self):
        return f"[{self.id}] {self.device_name}"


class DevicePrivateData(Model):
    id = fields.IntField(pk=True)
    device = fields.OneToOneField("models.DevicePublicData", related_name="private_data")

    device_user_name = fields.CharField(max_length=64, null=True)
    device_password = fields.CharField(max_length=64, null=True)
    server_port = fields.IntField(null=True)

    money_owed = fields.BigIntField(default=0)
    """The amount (in satoshis) payable to the device owner."""

    pending_payment_id = fields.IntField(null=True)
    """The payment being refunded, while a refund is in flight."""

    pending_refund_address = fields.CharField(max_length=255, null=True)
    pending_refund_amount = fields.BigIntField(null=True)
    pending_pay_amount = fields.BigIntField(null=True)
