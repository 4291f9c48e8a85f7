"""Resolve BaaS-issued access tokens into principals"""

from typing import Optional

from jose import JWTError, jwt

from storefront_gateway.config import settings
from storefront_gateway.domain.exceptions import UnauthorizedError
from storefront_gateway.domain.models import Principal

ALGORITHM = "HS256"


class SessionVerifier:
    """Verifies access tokens signed with the auth provider's JWT secret"""

    def __init__(self, secret: str | None = None, audience: str | None = None):
        self.secret = secret or settings.supabase_jwt_secret
        self.audience = audience or settings.supabase_jwt_audience

    def verify(self, token: str) -> Principal:
        """
        Decode and validate an access token.

        Raises:
            UnauthorizedError: On a missing secret, bad signature, expired
                token, wrong audience or missing subject
        """
        if not self.secret:
            raise UnauthorizedError("JWT secret is not configured")

        try:
            claims = jwt.decode(token, self.secret, algorithms=[ALGORITHM], audience=self.audience)
        except JWTError as e:
            raise UnauthorizedError(f"Invalid session token: {e}") from e

        user_id = claims.get("sub")
        if not user_id:
            raise UnauthorizedError("Session token has no subject")

        return Principal(user_id=user_id, email=claims.get("email"))


def extract_token(authorization: Optional[str], cookie: Optional[str]) -> Optional[str]:
    """Bearer token from the Authorization header, falling back to the session cookie"""
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            return credentials.strip()
    return cookie or None
