from marshmallow import ValidationError

from p2pvps.models.listing import DeviceLogin
from p2pvps.serializer.services import DeviceLoginSchema
from .base import ServiceClient, ServiceError


class PortControlClient(ServiceClient):
    """Allocates logins and SSH ports for devices."""

    service_name = "port-control"
    login_schema = DeviceLoginSchema()

    async def create_login(self) -> DeviceLogin:
        body = await self.request("GET", "/create")
        try:
            return self.login_schema.load(body)
        except ValidationError as error:
            raise ServiceError(f"Unexpected response from port control: {error.messages}") from error
