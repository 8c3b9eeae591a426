"""
Auth Views
----------

Exchanges a username and password for a token.
"""
from http import HTTPStatus

from aiohttp_apispec import docs
from marshmallow.fields import String

from p2pvps.serializer import JSendSchema, JSendStatus
from p2pvps.serializer.decorators import expects, returns
from p2pvps.serializer.models import LoginSchema, UserSchema
from p2pvps.service.access.users import authenticate
from p2pvps.views.base import BaseView


class AuthView(BaseView):
    """
    Logs a user in.
    """
    url = "/auth"
    name = "auth"

    @docs(summary="Log In")
    @expects(LoginSchema())
    @returns(
        authenticated=JSendSchema.of(token=String(), user=UserSchema()),
        bad_credentials=(JSendSchema(), HTTPStatus.UNAUTHORIZED)
    )
    async def post(self):
        user = await authenticate(self.request["data"]["username"], self.request["data"]["password"])
        if user is None:
            return "bad_credentials", {
                "status": JSendStatus.FAIL,
                "data": {"message": "The username or password is incorrect."}
            }

        return "authenticated", {
            "status": JSendStatus.SUCCESS,
            "data": {"token": self.token_verifier.issue_token(user), "user": user.serialize()}
        }
