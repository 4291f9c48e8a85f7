"""/api/admin/users and /api/admin/stripe-keys - back-office administration"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront_gateway.api.dependencies import get_request_id, require_roles
from storefront_gateway.api.v1.schemas import (
    ProfileSchema,
    StripeKeysResponse,
    SuccessResponse,
    UpdateUserRequest,
    UserSchema,
    UsersResponse,
)
from storefront_gateway.config import settings
from storefront_gateway.domain.authorization import ADMIN, ADMIN_ROLES, KNOWN_ROLES
from storefront_gateway.domain.models import Principal
from storefront_gateway.infrastructure.database.repositories import ProfileRepository, SettingsRepository
from storefront_gateway.infrastructure.database.session import get_db
from storefront_gateway.infrastructure.observability.metrics import record_upstream_failure

router = APIRouter()

admin_only = require_roles(*ADMIN_ROLES)


def _database_error(db: Session, request_id: str, action: str, error: Exception) -> HTTPException:
    db.rollback()
    record_upstream_failure("database")
    logging.error(f"Error in users {action} route: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")


@router.get("/admin/users", response_model=UsersResponse)
def list_users(
    request: Request,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """All users with their profile; users without a profile get the defaults"""
    try:
        users = ProfileRepository(db).list_users()
    except SQLAlchemyError as e:
        raise _database_error(db, get_request_id(request), "GET", e)

    return UsersResponse(
        users=[
            UserSchema(
                id=user.id,
                email=user.email,
                created_at=user.created_at,
                last_sign_in_at=user.last_sign_in_at,
                profile=(
                    ProfileSchema(
                        role=user.profile.role,
                        email_notifications=user.profile.email_notifications,
                        sms_notifications=user.profile.sms_notifications,
                        preferred_language=user.profile.preferred_language,
                    )
                    if user.profile
                    else ProfileSchema()
                ),
            )
            for user in users
        ]
    )


@router.put("/admin/users", response_model=SuccessResponse, response_model_exclude_none=True)
def update_user(
    request_body: UpdateUserRequest,
    request: Request,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    if request_body.profile.role not in KNOWN_ROLES:
        raise HTTPException(status_code=400, detail=f"Unknown role: {request_body.profile.role}")

    repo = ProfileRepository(db)
    try:
        profile = repo.get_profile(request_body.id)
        if profile is None:
            raise HTTPException(status_code=404, detail="Profile not found")

        repo.update_profile(profile, request_body.profile.model_dump())
        db.commit()
    except SQLAlchemyError as e:
        raise _database_error(db, get_request_id(request), "PUT", e)

    logging.info(
        "Profile updated",
        extra={
            "request_id": get_request_id(request),
            "user_id": principal.user_id,
            "target_user_id": request_body.id,
            "role": request_body.profile.role,
        },
    )
    return SuccessResponse()


@router.delete("/admin/users", response_model=SuccessResponse, response_model_exclude_none=True)
def delete_user(
    request: Request,
    id: str | None = Query(None, description="User identifier"),
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    if not id:
        raise HTTPException(status_code=400, detail="User ID is required")

    try:
        deleted = ProfileRepository(db).delete_user(id)
        if not deleted:
            raise HTTPException(status_code=404, detail="User not found")
        db.commit()
    except SQLAlchemyError as e:
        raise _database_error(db, get_request_id(request), "DELETE", e)

    logging.info(
        "User deleted",
        extra={"request_id": get_request_id(request), "user_id": principal.user_id, "target_user_id": id},
    )
    return SuccessResponse()


@router.get("/admin/stripe-keys", response_model=StripeKeysResponse)
def get_stripe_keys(
    request: Request,
    principal: Principal = Depends(require_roles(ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Stripe keys stored in the payment settings, falling back to the
    environment configuration key by key.
    """
    try:
        stored = SettingsRepository(db).get("payment") or {}
    except SQLAlchemyError as e:
        db.rollback()
        logging.warning(f"Payment settings unavailable, using environment: {e}", extra={"request_id": get_request_id(request)})
        stored = {}

    return StripeKeysResponse(
        stripe_public_key=stored.get("stripe_public_key") or settings.stripe_publishable_key,
        stripe_secret_key=stored.get("stripe_secret_key") or settings.stripe_secret_key,
        stripe_webhook_secret=stored.get("stripe_webhook_secret") or settings.stripe_webhook_secret,
        currency=stored.get("payment_currency") or "usd",
    )
