"""
Decorators
----------
"""

from functools import wraps
from http import HTTPStatus

from aiohttp import web
from aiohttp.web_urldispatcher import View

from p2pvps.permissions.permission import RoutePermissionError, Permission
from p2pvps.serializer import JSendSchema, JSendStatus

response_schema = JSendSchema()


def requires(permission: Permission):
    """
    Runs the route only if the permission is met, otherwise
    responds with a 401 explaining what was missing.
    """

    if not isinstance(permission, Permission):
        raise TypeError(f"Expected a Permission, not {type(permission)}")

    def decorator(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):
            try:
                await permission(self, **kwargs)
            except RoutePermissionError as error:
                return web.json_response(response_schema.dump({
                    "status": JSendStatus.FAIL,
                    "data": {
                        "message": f"You cannot do that because {error}.",
                        "reasons": error.serialize()
                    }
                }), status=HTTPStatus.UNAUTHORIZED)

            return await original_function(self, **kwargs)

        return new_func

    return decorator
