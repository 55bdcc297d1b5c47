"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from justping.api.deps import (
    auth_service,
    current_auth,
    password_reset_service,
    registration_service,
    require_auth,
    success,
    timing,
)
from justping.core.errors import BadRequest
from justping.core.extensions import limiter
from justping.schemas import (
    ChangePasswordSchema,
    ForgotPasswordSchema,
    LoginSchema,
    LogoutSchema,
    RefreshTokenSchema,
    RegisterSchema,
    ResetPasswordSchema,
)
from justping.services.auth import ChangePasswordIn, LoginIn, LogoutIn, RefreshIn
from justping.services.registration import BusinessProfileIn, RegistrationIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
forgot_password_schema = ForgotPasswordSchema()
reset_password_schema = ResetPasswordSchema()
change_password_schema = ChangePasswordSchema()
logout_schema = LogoutSchema()


def _auth_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


def _body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
def register():
    """Create a business with its Admin user and email the set-password link."""

    data = register_schema.load(_body())
    business = data["business"]
    user = data["user"]
    result = registration_service().register(
        RegistrationIn(
            business=BusinessProfileIn(
                name=business["name"],
                description=business.get("description"),
                website=business.get("website"),
                industry=business.get("industry"),
                contact_info=business.get("contact_info") or {},
            ),
            email=user["email"],
            first_name=user["first_name"],
            last_name=user["last_name"],
        )
    )
    return success(
        {"businessId": result.business_id, "userId": result.user_id},
        message="Business registered successfully. Check your email to set your password.",
        status=201,
    )


@bp.post("/login")
@limiter.limit(_auth_rate_limit)
@timing
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = login_schema.load(_body())
    result = auth_service().login(LoginIn(email=data["email"], password=data["password"]))
    return success(result.as_dict(), message="Login successful")


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Exchange a refresh token for a new pair."""

    data = refresh_schema.load(_body())
    tokens = auth_service().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return success(tokens.as_dict(), message="Token refreshed successfully")


@bp.post("/forgot-password")
@limiter.limit(_auth_rate_limit)
@timing
def forgot_password():
    """Start a password reset; the answer never reveals whether the email exists."""

    data = forgot_password_schema.load(_body())
    message = password_reset_service().request_reset(data["email"])
    return success(message=message)


@bp.post("/reset-password")
@timing
def reset_password():
    data = reset_password_schema.load(_body())
    password_reset_service().reset_password(data["token"], data["password"])
    return success(message="Password has been reset successfully")


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the caller with their roles and effective permissions."""

    profile = auth_service().get_current_user(current_auth().user_id)
    return success(profile.as_dict())


@bp.put("/change-password")
@require_auth
@timing
def change_password():
    """Change the caller's password; other sessions must sign in again."""

    data = change_password_schema.load(_body())
    tokens = auth_service().change_password(
        current_auth().user_id,
        ChangePasswordIn(
            current_password=data["current_password"],
            new_password=data["new_password"],
        ),
    )
    return success(tokens.as_dict(), message="Password changed successfully")


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Blacklist the presented access token and optionally every refresh token."""

    data = logout_schema.load(_body())
    auth = current_auth()
    if auth.via_identity_provider:
        raise BadRequest("Logout requires an access token")
    auth_service().logout(LogoutIn(token=auth.token, all_sessions=data["all_sessions"]))
    return success(message="Logged out successfully")
