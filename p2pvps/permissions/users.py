from aiohttp.web_urldispatcher import View

from p2pvps.models import User
from p2pvps.permissions.permission import RoutePermissionError, Permission
from p2pvps.service.access.users import get_user


class UserIsAdmin(Permission):
    """Asserts that the token belongs to an admin."""

    async def __call__(self, view: View, user: User = None, **kwargs):
        if "token" not in view.request:
            raise RoutePermissionError("No admin jwt was included in the Authorization header.")

        if user is None or not view.request["token"] == user.id:
            # an admin is acting on someone else's resources; we need to get the admin's details
            user = await get_user(user_id=view.request["token"])

        if user is None or not user.is_admin:
            raise RoutePermissionError("The supplied token doesn't have admin rights.")

    def __repr__(self):
        return "UserIsAdmin()"


class UserMatchesToken(Permission):
    """Asserts that the given user is the one the token was issued to."""

    async def __call__(self, view: View, user: User = None, **kwargs):
        if "token" not in view.request:
            raise RoutePermissionError("No jwt was included in the Authorization header.")

        if user is None or not user.id == view.request["token"]:
            raise RoutePermissionError("The supplied token doesn't have access to this resource.")

    def __repr__(self):
        return "UserMatchesToken()"
