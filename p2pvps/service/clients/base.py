"""
Service Client
--------------

The base for the clients that talk to the other services of the marketplace.

Every call goes through a circuit breaker, so that a service that is down
fails fast instead of tying up requests until they time out. A 404 from a
service is raised as a :class:`ServiceNotFoundError`, which callers may treat
as "already done". Only failures of the service itself count towards opening
the circuit. A request the service refuses (a 4xx) does not.
"""
import asyncio
from http import HTTPStatus
from typing import Optional, Dict, Any

import aiohttp
from aiobreaker import CircuitBreaker, CircuitBreakerError

from p2pvps import logger
from p2pvps.config import client_timeout, breaker_fail_max, breaker_reset_timeout


class ServiceError(Exception):
    """Raised when a call to another service fails."""

    def __init__(self, message, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class ServiceRequestError(ServiceError):
    """Raised when the other service refuses the request itself (a 4xx)."""


class ServiceNotFoundError(ServiceRequestError):
    """Raised when the other service reports the resource as missing."""


class ServiceClient:
    """
    A JSON over HTTP client for a single service.

    The :class:`aiohttp.ClientSession` is created on first use so that the
    client can be built outside of the event loop.
    """

    service_name = "service"

    def __init__(self, base_url: str, *, timeout: float = client_timeout, breaker: CircuitBreaker = None):
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None
        self._breaker = breaker if breaker is not None else CircuitBreaker(
            fail_max=breaker_fail_max,
            timeout_duration=breaker_reset_timeout,
            exclude=[ServiceRequestError],
        )

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self):
        """Closes the underlying session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def request(self, method: str, path: str, *, token: str = None, json: Any = None) -> Dict[str, Any]:
        """
        Makes a request to the service, returning the decoded JSON body.

        :param method: The HTTP method.
        :param path: The path, relative to the base url.
        :param token: An optional JWT to send as a bearer token.
        :param json: An optional JSON body.
        :raises ServiceNotFoundError: When the service responds with a 404.
        :raises ServiceError: When the service is unreachable or responds with an error.
        """
        try:
            return await self._breaker.call_async(self._request, method, path, token=token, json=json)
        except CircuitBreakerError as error:
            raise ServiceError(f"The {self.service_name} service is unavailable.") from error

    async def _request(self, method, path, *, token=None, json=None):
        url = f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {token}"} if token is not None else {}

        logger.debug("%s %s", method, url)
        try:
            async with self.session.request(method, url, json=json, headers=headers) as response:
                if response.status == HTTPStatus.NOT_FOUND:
                    raise ServiceNotFoundError(f"{method} {url} was not found.", response.status)
                if response.status >= 500:
                    raise ServiceError(f"{method} {url} failed with {response.status}.", response.status)
                if response.status >= 400:
                    raise ServiceRequestError(f"{method} {url} was refused with {response.status}.", response.status)
                if response.status == HTTPStatus.NO_CONTENT:
                    return {}
                return await response.json()
        except asyncio.TimeoutError as error:
            raise ServiceError(f"{method} {url} timed out after {self._timeout.total}s.") from error
        except aiohttp.ClientError as error:
            raise ServiceError(f"{method} {url} failed: {error}") from error
