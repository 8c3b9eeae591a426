"""
Decorators
----------

Decorators that take care of the JSON going in and out of the routes.

``expects`` validates the request body against a schema before the route
runs, and ``returns`` dumps whatever the route returns through a schema.
Both respond with JSend, so a route only has to deal with valid data.

.. note:: ``@expects(None)`` and ``@returns(None)`` do nothing, but make
    it obvious that a route neither takes nor gives a body.
"""

from functools import wraps
from http import HTTPStatus
from json import JSONDecodeError
from typing import Optional, Tuple, Union

from aiohttp import web
from aiohttp.web_urldispatcher import View
from marshmallow import Schema, ValidationError
from marshmallow_jsonschema import JSONSchema

from .jsend import JSendSchema, JSendStatus

NamedSchema = Union[Schema, Tuple[Schema, HTTPStatus]]


def _bad_request(message: str, **data) -> web.Response:
    body = JSendSchema().dump({
        "status": JSendStatus.FAIL,
        "data": {"message": message, **data},
    })
    return web.json_response(body, status=HTTPStatus.BAD_REQUEST)


def expects(schema: Optional[Schema], into="data"):
    """
    Validates the JSON body of the request against the schema, storing
    the loaded data on the request under ``into``.

    .. code:: python

        @expects(PaymentCreateSchema())
        async def post(self):
            amount = self.request["data"]["amount"]

    A missing, malformed, or invalid body gets a 400, along with the
    JSON schema the route wanted.

    :param schema: The schema to validate.
    :param into: The key to store the validated data in.
    """

    if schema is None:
        return lambda x: x

    if not isinstance(schema, Schema):
        raise TypeError(f"Expected a Schema, not {type(schema)}")

    json_schema = JSONSchema().dump(schema)["definitions"][type(schema).__name__]

    def decorator(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):
            request = self.request

            if not request.body_exists or request.content_type != "application/json":
                return _bad_request(
                    f"This route ({request.method}: {request.rel_url}) only accepts JSON.",
                    schema=json_schema
                )

            try:
                body = await request.json()
            except JSONDecodeError as err:
                return _bad_request("Could not parse supplied JSON.", errors=err.args)

            try:
                request[into] = schema.load(body)
            except ValidationError as err:
                return _bad_request(
                    "The request did not validate properly.",
                    errors=err.messages, schema=json_schema
                )

            return await original_function(self, **kwargs)

        return new_func

    return decorator


def returns(schema: Optional[Schema] = None, return_code: HTTPStatus = HTTPStatus.OK, **named_schema: NamedSchema):
    """
    Dumps the data returned by the route through the schema, so that
    a route can simply return a dictionary.

    .. code:: python

        @returns(JSendSchema.of(device=DeviceSchema()))
        async def get(self, device):
            return {"status": JSendStatus.SUCCESS, "data": {"device": device.serialize()}}

    A route with more than one outcome declares a schema per outcome instead,
    optionally paired with a status code, and returns ``(name, data)``:

    .. code:: python

        @returns(listed=(JSendSchema.of(ob_contract=String()), HTTPStatus.CREATED),
                 unavailable=(JSendSchema(), HTTPStatus.BAD_GATEWAY))
        async def post(self, device):
            ...
            return "listed", {"status": JSendStatus.SUCCESS, "data": {"ob_contract": contract_id}}

    :param schema: The schema for the single outcome.
    :param return_code: The status code for the single outcome.
    :param named_schema: The schema (and status code) of each named outcome.
    """

    if schema is None and not named_schema:
        return lambda x: x

    outcomes = {
        name: value if isinstance(value, tuple) else (value, return_code)
        for name, value in named_schema.items()
    }
    outcomes[None] = (schema, return_code)

    def decorator(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):
            result = await original_function(self, **kwargs)
            outcome, response_data = (None, result) if schema is not None else result

            try:
                matched_schema, status = outcomes[outcome]
                return web.json_response(matched_schema.dump(response_data), status=status)
            except (ValidationError, KeyError) as err:
                body = JSendSchema().dump({
                    "status": JSendStatus.ERROR,
                    "data": {"errors": err.messages if isinstance(err, ValidationError) else list(err.args)},
                    "message": "We tried to send you data back, but it came out wrong.",
                })
                return web.json_response(body, status=HTTPStatus.INTERNAL_SERVER_ERROR)

        return new_func

    return decorator
