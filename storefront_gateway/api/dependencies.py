"""Dependency injection for FastAPI endpoints"""

import logging
from typing import Callable

from fastapi import Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront_gateway.config import settings
from storefront_gateway.domain.authorization import is_authorized
from storefront_gateway.domain.exceptions import UnauthorizedError
from storefront_gateway.domain.models import Principal
from storefront_gateway.infrastructure.auth.session import SessionVerifier, extract_token
from storefront_gateway.infrastructure.clients.ai import OpenAIClient
from storefront_gateway.infrastructure.clients.mailer import EmailClient
from storefront_gateway.infrastructure.clients.payments import StripeClient
from storefront_gateway.infrastructure.database.repositories import ProfileRepository
from storefront_gateway.infrastructure.database.session import get_db
from storefront_gateway.infrastructure.observability.metrics import authorization_denied_counter


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_stripe_client() -> StripeClient:
    return StripeClient()


def get_openai_client() -> OpenAIClient:
    return OpenAIClient()


def get_email_client() -> EmailClient:
    return EmailClient()


def get_session_verifier() -> SessionVerifier:
    return SessionVerifier()


def _deny(request: Request, reason: str, detail: str) -> HTTPException:
    authorization_denied_counter.labels(reason=reason).inc()
    logging.warning(
        f"Authorization denied: {detail}",
        extra={"request_id": get_request_id(request), "step": "authorization", "reason": reason},
    )
    return HTTPException(status_code=401, detail="Unauthorized")


def get_current_principal(
    request: Request,
    verifier: SessionVerifier = Depends(get_session_verifier),
) -> Principal:
    """Authenticated principal; 401 when the session is absent or invalid"""
    token = extract_token(
        request.headers.get("Authorization"),
        request.cookies.get(settings.session_cookie_name),
    )
    if not token:
        raise _deny(request, "no_session", "no session token")
    try:
        return verifier.verify(token)
    except UnauthorizedError as e:
        raise _deny(request, "invalid_session", str(e))


def require_roles(*roles: str) -> Callable[..., Principal]:
    """
    Build a dependency that admits only principals whose stored role is in `roles`.

    Fails closed: a database error while reading the role is a 401, same
    as a missing profile or a role outside the allow-list.
    """
    allowed = frozenset(roles)

    def guard(
        request: Request,
        principal: Principal = Depends(get_current_principal),
        db: Session = Depends(get_db),
    ) -> Principal:
        try:
            role = ProfileRepository(db).get_role(principal.user_id)
        except SQLAlchemyError as e:
            db.rollback()
            raise _deny(request, "role_lookup_failed", str(e))

        if not is_authorized(principal, role, allowed):
            raise _deny(request, "role", f"role {role!r} not in {sorted(allowed)}")

        principal.role = role
        return principal

    return guard
