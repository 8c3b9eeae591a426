"""
Permission
----------

Permissions compose with ``&`` and ``|``:

.. code:: python

    @requires(UserOwnsDevice() | UserIsAdmin())
    async def post(self, device):
        ...
"""

from abc import ABC, abstractmethod
from itertools import chain
from typing import List

from aiohttp.web_urldispatcher import View


class RoutePermissionError(Exception):
    """
    Raised when a permission is not met. A composite permission raises
    one of these holding the errors of the permissions it is made of.
    """

    def __init__(self, *messages, qualifier=None, sub_errors: List['RoutePermissionError'] = None):
        """
        :param qualifier: How the sub errors are joined ("and" / "or").
        :param sub_errors: The errors of the permissions that failed.
        """
        if messages and (qualifier is not None or sub_errors is not None):
            raise ValueError("RoutePermissionError may either return a message or sub errors.")

        super().__init__(*messages)
        self.messages = messages
        self.sub_errors = sub_errors if sub_errors is not None else []
        self.qualifier = qualifier

    def __str__(self):
        """Reads the error as a sentence, such as "x, y or z"."""
        if not self.sub_errors:
            return ", ".join(m.lower().strip(".") for m in self.messages)

        reasons = [str(error) for error in self.sub_errors]
        if len(reasons) > 1:
            reasons[-1] = f"{self.qualifier} {reasons[-1]}"
        return ", ".join(reasons)

    def serialize(self) -> List[str]:
        """Flattens the messages of this error and all its sub errors."""
        return list(chain(self.messages, chain.from_iterable(error.serialize() for error in self.sub_errors)))


class Permission(ABC):
    """
    The base class for permissions. A permission is awaited with the view and
    the keyword arguments of the route, and raises a :class:`RoutePermissionError`
    if it is not met.
    """

    def __and__(self, other):
        return AndPermission(*self._flatten(AndPermission), *other._flatten(AndPermission))

    def __or__(self, other):
        return OrPermission(*self._flatten(OrPermission), *other._flatten(OrPermission))

    def _flatten(self, kind):
        """Unpacks a permission of the same kind, so that a & (b & c) becomes a & b & c."""
        return [self]

    @abstractmethod
    async def __call__(self, view: View, **kwargs) -> None:
        """
        Evaluates the permission.

        :raises RoutePermissionError: If the permission failed.
        """


class CompositePermission(Permission, ABC):
    """A permission made up of a number of others."""

    symbol: str

    def __init__(self, *permissions: Permission):
        self._permissions = permissions

    def _flatten(self, kind):
        return list(self._permissions) if isinstance(self, kind) else [self]

    def __repr__(self):
        return "(" + f" {self.symbol} ".join(repr(p) for p in self._permissions) + ")"

    def __len__(self):
        return len(self._permissions)


class AndPermission(CompositePermission):
    """Passes if all of its permissions pass."""

    symbol = "&"

    async def __call__(self, view, **kwargs):
        errors = []

        for permission in self._permissions:
            try:
                await permission(view, **kwargs)
            except RoutePermissionError as error:
                errors.append(error)

        if errors:
            raise RoutePermissionError(qualifier="and", sub_errors=errors)


class OrPermission(CompositePermission):
    """Passes if any of its permissions pass."""

    symbol = "|"

    async def __call__(self, view, **kwargs):
        errors = []

        for permission in self._permissions:
            try:
                await permission(view, **kwargs)
            except RoutePermissionError as error:
                errors.append(error)
            else:
                return

        raise RoutePermissionError(qualifier="or", sub_errors=errors)
