"""
The models package contains all the models used on the server.

.. autoclasstree:: p2pvps.models
"""

from .device import DevicePublicData, DevicePrivateData
from .payment import Payment
from .user import User, UserType
