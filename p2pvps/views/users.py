"""
User Related Views
-------------------------

Handles creating and viewing users.
"""
from http import HTTPStatus

from aiohttp_apispec import docs
from marshmallow.fields import String

from p2pvps.models import User
from p2pvps.permissions import UserMatchesToken, UserIsAdmin, requires
from p2pvps.serializer import JSendSchema, JSendStatus
from p2pvps.serializer.decorators import expects, returns
from p2pvps.serializer.models import UserSchema
from p2pvps.service.access.users import get_user, create_user, UserExistsError
from p2pvps.views.base import BaseView
from p2pvps.views.decorators import match_getter


class UsersView(BaseView):
    """
    Adds to the list of users.
    """
    url = "/users"
    name = "users"

    @docs(summary="Create A User")
    @expects(UserSchema(only=('username', 'password', 'name')))
    @returns(
        created=(JSendSchema.of(token=String(), user=UserSchema()), HTTPStatus.CREATED),
        user_exists=(JSendSchema(), HTTPStatus.CONFLICT)
    )
    async def post(self):
        """
        Signs up a new user, returning them along with a token so they can get started right away.
        """
        try:
            user = await create_user(**self.request["data"])
        except UserExistsError as error:
            return "user_exists", {
                "status": JSendStatus.FAIL,
                "data": {"message": "Could not create that user.", "errors": error.errors}
            }

        return "created", {
            "status": JSendStatus.SUCCESS,
            "data": {"token": self.token_verifier.issue_token(user), "user": user.serialize()}
        }


class UserView(BaseView):
    """
    Gets a single user.
    """
    url = "/users/{id}"
    name = "user"
    with_user = match_getter(get_user, 'user', user_id='id')

    @with_user
    @docs(summary="Get A User")
    @requires(UserMatchesToken() | UserIsAdmin())
    @expects(None)
    @returns(JSendSchema.of(user=UserSchema()))
    async def get(self, user: User):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"user": user.serialize()}
        }
