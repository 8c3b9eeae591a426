"""
JSend Schema
------------

Every response of the API is wrapped in a `JSend`_ envelope:

.. code:: json

    {"status": "success", "data": {"ob_contract": "5c8a..."}}
    {"status": "fail", "data": {"message": "Could not find device with the given params."}}
    {"status": "error", "message": "One of the marketplace services could not complete the request."}

.. _`JSend`: https://github.com/omniti-labs/jsend
"""

from enum import Enum

from marshmallow import Schema, fields, validates_schema, ValidationError
from marshmallow.fields import Field

from .fields import EnumField


class JSendStatus(str, Enum):

    SUCCESS = "success"
    """Everything went as expected."""

    FAIL = "fail"
    """The request, or the data supplied with it, was wrong."""

    ERROR = "error"
    """Something went wrong on our side (or with a service we depend on)."""


class JSendSchema(Schema):
    status = EnumField(JSendStatus, required=True)
    data = fields.Dict()
    message = fields.String()
    code = fields.Integer()

    @validates_schema
    def assert_fields(self, data, **kwargs):
        """
        Checks the envelope: ``success`` and ``fail`` carry ``data`` (a failure
        with a user friendly message in it), and ``error`` carries a ``message``.
        """
        status = data["status"]

        if status is not JSendStatus.ERROR and "data" not in data:
            raise ValidationError(f"When status is {status.value}, the data field must be populated.")
        if status is JSendStatus.FAIL and "message" not in data["data"]:
            raise ValidationError("All failures must return user-friendly error message.")
        if status is JSendStatus.ERROR and "message" not in data:
            raise ValidationError(f"When the status is {status.value}, the message field must be populated.")

    @staticmethod
    def of(**kwargs) -> 'JSendSchema':
        """
        Creates a JSendSchema whose ``data`` must match the given fields.
        Schemas are nested, fields are used as they are.

        >>> ledger_schema = JSendSchema.of(ledger=LedgerSchema())
        >>> ledger = ledger_schema.load(await response.json())["data"]["ledger"]
        """
        data_fields = {
            name: value if isinstance(value, Field) else fields.Nested(value)
            for name, value in kwargs.items()
        }
        DataSchema = Schema.from_dict(data_fields, name="DataSchema")

        class TypedJSendSchema(JSendSchema):
            data = fields.Nested(DataSchema)

        return TypedJSendSchema()
