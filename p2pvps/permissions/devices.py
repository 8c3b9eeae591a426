from aiohttp.web_urldispatcher import View

from p2pvps.models import DevicePublicData
from p2pvps.permissions.permission import RoutePermissionError, Permission


class UserOwnsDevice(Permission):
    """Asserts that the token belongs to the owner of the given device."""

    async def __call__(self, view: View, device: DevicePublicData = None, **kwargs):
        if "token" not in view.request:
            raise RoutePermissionError("No jwt was included in the Authorization header.")

        if device is None or not device.owner_id == view.request["token"]:
            raise RoutePermissionError("The supplied token does not own this device.")

    def __repr__(self):
        return "UserOwnsDevice()"
