"""
Middleware
----------
"""
from http import HTTPStatus

from aiohttp import web
from aiohttp.abc import Request
from aiohttp.web_middlewares import middleware

from p2pvps.serializer import JSendStatus, JSendSchema
from p2pvps.service.verify_token import verify_token, TokenVerificationError

response_schema = JSendSchema()


@middleware
async def validate_token_middleware(request: Request, handler):
    """
    Rejects requests with a bad Authorization header. For a good one,
    the id of the user it was issued to is stored on the request as "token".
    """
    if "Authorization" not in request.headers:
        return await handler(request)

    try:
        request["token"] = verify_token(request)
    except TokenVerificationError as error:
        return web.json_response(response_schema.dump({
            "status": JSendStatus.FAIL,
            "data": {
                "message": "Supplied authorization token is invalid.",
                "errors": [error.message]
            }
        }), status=HTTPStatus.UNAUTHORIZED)

    return await handler(request)
