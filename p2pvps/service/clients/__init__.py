"""
.. autoclasstree:: p2pvps.service.clients

Clients for the other services that make up the marketplace. Each speaks
JSON over HTTP and reports failures as a :class:`~p2pvps.service.clients.base.ServiceError`.
"""

from .auth import AuthClient, AdminCredentials
from .base import ServiceClient, ServiceError, ServiceRequestError, ServiceNotFoundError
from .obcontract import ObContractClient
from .openbazaar import OpenBazaarClient
from .port_control import PortControlClient
