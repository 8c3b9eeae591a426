"""
Verify Token
------------

Issues and verifies the JWTs handed out to users when they log in.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

from aiohttp.web_request import Request
from jose import jwt, ExpiredSignatureError, JWTError

from p2pvps.config import jwt_secret, jwt_lifetime


class TokenVerificationError(Exception):

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class TokenVerifier(ABC):

    @abstractmethod
    def verify_token(self, token) -> int:
        """
        Given a token, verifies it, returning the id of the user it was issued to.

        :raises TokenVerificationError: When the provided token is invalid.
        """


class JWTVerifier(TokenVerifier):
    """
    Issues and verifies HMAC signed tokens.
    """

    algorithm = "HS256"

    def __init__(self, secret: str = jwt_secret, lifetime: timedelta = jwt_lifetime):
        self._secret = secret
        self.lifetime = lifetime

    def issue_token(self, user, now: datetime = None) -> str:
        """Creates a token for the given user."""
        now = now if now is not None else datetime.now(timezone.utc)
        claims = {
            "sub": str(user.id),
            "type": user.type.value,
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify_token(self, token, verify_exp=True) -> int:
        if not isinstance(token, str):
            raise TokenVerificationError(f"Token must be of type string, not {type(token).__name__}.")

        try:
            claims = jwt.decode(token, self._secret, algorithms=[self.algorithm], options={"verify_exp": verify_exp})
        except ExpiredSignatureError as e:
            raise TokenVerificationError("Token is expired.") from e
        except JWTError as e:
            raise TokenVerificationError("Token is invalid.") from e

        try:
            return int(claims["sub"])
        except (KeyError, ValueError) as e:
            raise TokenVerificationError("Token does not identify a user.") from e


def verify_token(request: Request) -> int:
    """
    Checks a view for the existence of a valid Authorization header.

    :param request: The request to check.
    :return: The id of the user the token was issued to.
    :raises TokenVerificationError: When the Authorization header is invalid.
    """
    if "Authorization" not in request.headers:
        raise TokenVerificationError("You must supply your token.")

    if not request.headers["Authorization"].startswith("Bearer "):
        raise TokenVerificationError("The Authorization header must be of the format \"Bearer $TOKEN\".")

    return request.app["token_verifier"].verify_token(request.headers["Authorization"][7:])
