"""
.. autoclasstree:: p2pvps.permissions

This module contains the various permission types. A permission is essentially
just an object (either function or class) that can be called asynchronously
and raises a RoutePermissionError in the case of a failed permission.
"""

from p2pvps.permissions.decorators import requires
from p2pvps.permissions.devices import UserOwnsDevice
from p2pvps.permissions.permission import Permission, RoutePermissionError
from p2pvps.permissions.users import UserMatchesToken, UserIsAdmin
