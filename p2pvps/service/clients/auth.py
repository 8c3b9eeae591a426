from dataclasses import dataclass

from marshmallow import ValidationError

from p2pvps.serializer.services import AuthResponseSchema
from .base import ServiceClient, ServiceError


@dataclass(frozen=True)
class AdminCredentials:
    """The login of the system admin, which owns the marketplace contracts."""

    username: str
    password: str


class AuthClient(ServiceClient):
    """Logs in to the auth service."""

    service_name = "auth"
    response_schema = AuthResponseSchema()

    async def login(self, credentials: AdminCredentials) -> str:
        """
        Logs in with the given credentials.

        :return: The JWT for the user.
        :raises ServiceError: When the credentials are refused.
        """
        body = await self.request("POST", "/auth", json={
            "username": credentials.username,
            "password": credentials.password,
        })

        try:
            return self.response_schema.load(body)["token"]
        except ValidationError as error:
            raise ServiceError(f"Unexpected response from the auth service: {error.messages}") from error
