"""
Service Serializers
-------------------

Defines the wire format of the other services in the marketplace.
Their JSON is camelCased, so each field maps onto its ``data_key``.
"""

from marshmallow import Schema, post_load, post_dump, EXCLUDE
from marshmallow.fields import String, Integer, DateTime, Nested

from p2pvps.models.listing import ObContract, DeviceLogin, ListingState
from .fields import EnumField


class ObContractSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    id = String(data_key="_id")
    client_device = String(data_key="clientDevice", required=True)
    owner_user = String(data_key="ownerUser", required=True)
    renter_user = String(data_key="renterUser")
    price = Integer(required=True)
    expiration = DateTime(data_key="experation", required=True)
    title = String(required=True)
    description = String(required=True)
    listing_uri = String(data_key="listingUri")
    listing_slug = String(data_key="listingSlug")
    image_hash = String(data_key="imageHash")
    listing_state = EnumField(ListingState, data_key="listingState")
    created_at = DateTime(data_key="createdAt")
    updated_at = DateTime(data_key="updatedAt")

    @post_load
    def make_contract(self, data, **kwargs) -> ObContract:
        return ObContract(**data)

    @post_dump
    def remove_missing(self, data, **kwargs):
        """The services reject null fields, so we leave them out."""
        return {key: value for key, value in data.items() if value is not None}


class ObContractEnvelope(Schema):
    class Meta:
        unknown = EXCLUDE

    ob_contract = Nested(ObContractSchema(), data_key="obContract", required=True)


class DeviceLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = String(required=True)
    password = String(required=True)
    port = Integer(required=True)

    @post_load
    def make_login(self, data, **kwargs) -> DeviceLogin:
        return DeviceLogin(**data)


class RefundRequestSchema(Schema):
    addr = String(required=True)
    qty = Integer(required=True)
    payment_id = String(data_key="paymentId")
    """Identifies the refund so that the integration can ignore repeats."""


class AuthResponseSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    token = String(required=True)
