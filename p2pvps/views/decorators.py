"""
Decorators
-------------------------

``match_getter`` fetches the object a route acts on before the route runs,
and hands it to the route as a keyword argument.
"""
from enum import Enum
from functools import wraps
from inspect import isawaitable
from typing import Union, Any, Dict, Tuple, List

from aiohttp import web
from aiohttp.web_request import Request
from aiohttp.web_urldispatcher import View

from p2pvps.serializer import JSendStatus, JSendSchema
from p2pvps.service.verify_token import TokenVerificationError


class Optional:
    """Signify the match map entry to be optional."""

    def __init__(self, value):
        self.value = value


class GetFrom(Enum):
    AUTH_HEADER = "Authorization"
    """The id of the user the bearer token was issued to."""


def flatten(error) -> List[str]:
    """Collects the messages of an exception and any exceptions nested in its args."""
    errors = []
    for sub_error in error.args:
        if isinstance(sub_error, Exception):
            errors += flatten(sub_error)
        else:
            errors.append(sub_error)
    return errors


def _from_url(request: Request, name: str, converter: type):
    param = request.match_info.get(name)
    try:
        return converter(param)
    except (ValueError, TypeError):
        raise ValueError(f'Could not convert url parameter "{param}" to expected type {converter.__name__}.')


def _from_auth_header(request: Request) -> int:
    header = request.headers.get("Authorization")
    if header is None:
        raise LookupError("Missing Authorization header.")
    if not header.startswith("Bearer "):
        raise ValueError("Malformed Authorization header (expected Bearer $TOKEN).")

    try:
        return request.app["token_verifier"].verify_token(header[7:])
    except TokenVerificationError as error:
        raise ValueError(error.message)


def resolve_match_map(request: Request, match_map) -> Dict[str, Any]:
    """
    Resolves each entry in the match map against the request.

    :raises ValueError: With an error for each of the entries that could not be resolved.
    """
    resolved_matches = {}
    errors = []

    for key, value in match_map.items():
        is_optional = isinstance(value, Optional)
        if is_optional:
            value = value.value

        if isinstance(value, str):
            value = (value, int)

        try:
            if isinstance(value, tuple):
                resolved_matches[key] = _from_url(request, *value)
            elif value == GetFrom.AUTH_HEADER:
                resolved_matches[key] = _from_auth_header(request)
            else:
                raise TypeError(f"match_getter incorrectly configured (doesn't support {type(value)})")
        except LookupError as error:
            if not is_optional:
                errors.append(error)
        except ValueError as error:
            if not is_optional or isinstance(value, GetFrom):
                errors.append(error)

    if errors:
        raise ValueError(*errors)
    return resolved_matches


def _error_response(exception_type, **data):
    response = {"status": JSendStatus.FAIL, "data": data}
    return exception_type(text=JSendSchema().dumps(response), content_type='application/json')


def match_getter(getter_function, *injection_parameters: Union[str, Optional],
                 **match_map: Union[str, GetFrom, Optional, Tuple[str, type]]):
    """
    Fetches an item with the getter, passing it to the route, or 404's if it doesn't exist.

    .. code-block:: python

        @match_getter(get_device_public, 'device', device_id='id')
        async def get(self, device: DevicePublicData):
            return web.json_response(data=device.serialize())

    :param getter_function: The (async) function to fetch the item with.
    :param injection_parameters: The name(s) to pass the item as. When the getter
        returns a tuple, give a name for each element.
    :param match_map: Maps the kwargs of the ``getter_function`` to a url variable
        (optionally with a type to convert it to) or to a :class:`GetFrom` source.
    :return: A decorator that wraps the route and passes in the item.
    """

    def attach_instance(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):
            try:
                params = resolve_match_map(self.request, match_map)
            except (ValueError, TypeError) as error:
                raise _error_response(web.HTTPBadRequest, message="Errors with your request.", errors=flatten(error))

            item = getter_function(**params)
            if isawaitable(item):
                item = await item

            if len(injection_parameters) > 1 and isinstance(item, tuple):
                items = dict(zip(injection_parameters, item))
            else:
                items = {injection_parameters[0]: item}

            not_found = [key for key, value in items.items() if value is None and not isinstance(key, Optional)]
            if not_found:
                raise _error_response(
                    web.HTTPNotFound,
                    message=f'Could not find {", ".join(not_found)} with the given params.',
                    params=params
                )

            injected_kwargs = {key.value if isinstance(key, Optional) else key: value for key, value in items.items()}
            return await original_function(self, **kwargs, **injected_kwargs)

        return new_func

    return attach_instance
