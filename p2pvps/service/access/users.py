"""
Users
-----
"""
from typing import Optional

from passlib.context import CryptContext
from tortoise.exceptions import IntegrityError

from p2pvps.models import User, UserType

password_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class UserExistsError(Exception):
    def __init__(self, errors):
        super().__init__()
        self.errors = errors


async def get_user(*, user_id: int = None, username: str = None) -> Optional[User]:
    """
    :param user_id: The id of the user to get.
    :param username: The username of the user to get.
    :return: The matching user.
    """

    kwargs = {}
    if user_id is not None:
        kwargs["id"] = user_id

    if username is not None:
        kwargs["username"] = username

    if not kwargs:
        return None

    return await User.filter(**kwargs).first()


async def create_user(username: str, password: str, name: str = "", type: UserType = UserType.USER) -> User:
    """
    Creates a new user, storing a hash of their password.

    :raises UserExistsError: When the user with the given username already exists.
    """
    if await User.filter(username=username).exists():
        raise UserExistsError({"username": "User with that username already exists!"})

    try:
        return await User.create(username=username, password=password_context.hash(password), name=name, type=type)
    except IntegrityError as error:
        raise UserExistsError({"username": "User with that username already exists!"}) from error


async def authenticate(username: str, password: str) -> Optional[User]:
    """
    Checks a username and password.

    :return: The user if the password matches, otherwise None.
    """
    user = await get_user(username=username)
    if user is None or not password_context.verify(password, user.password):
        return None
    return user
