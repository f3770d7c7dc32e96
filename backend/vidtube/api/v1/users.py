"""Account and session endpoints.

Service errors raised here are rendered by the ``ServiceError`` handler
registered in :func:`vidtube.api.init_app`.
"""

from __future__ import annotations

from flask import Blueprint, request

from vidtube.api.deps import (
    REFRESH_COOKIE,
    clear_auth_cookies,
    current_principal_id,
    envelope,
    require_auth,
    set_auth_cookies,
    timing,
)
from vidtube.core.sessions import get_identity_service, get_session_manager
from vidtube.schemas import (
    AccountUpdateSchema,
    AvatarSchema,
    CoverImageSchema,
    LoginSchema,
    PasswordChangeSchema,
    RefreshSchema,
    RegisterSchema,
    SessionSchema,
    TokenPairSchema,
    UserSchema,
)
from vidtube.services.auth.dto import LoginIn, LogoutIn, RefreshIn
from vidtube.services.identity.dto import AccountUpdateIn, PasswordChangeIn, RegisterIn

bp = Blueprint("users", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
password_change_schema = PasswordChangeSchema()
account_update_schema = AccountUpdateSchema()
avatar_schema = AvatarSchema()
cover_image_schema = CoverImageSchema()
user_schema = UserSchema()
session_schema = SessionSchema()
token_pair_schema = TokenPairSchema()


def _body() -> dict:
    return request.get_json(silent=True) or {}


# --------------------------------------------------------------------------- #
# Registration and session lifecycle
# --------------------------------------------------------------------------- #


@bp.post("/register")
@timing
def register():
    """Create an account. Does not log the caller in."""

    data = register_schema.load(_body())
    user = get_identity_service().register(RegisterIn(**data))
    return envelope(user_schema.dump(user), "User registered successfully", status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate and issue an access/refresh pair (body and cookies)."""

    data = login_schema.load(_body())
    session = get_session_manager().login(LoginIn(**data))
    response = envelope(session_schema.dump(session), "User logged in successfully")
    return set_auth_cookies(
        response, access_token=session.access_token, refresh_token=session.refresh_token
    )


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Rotate the refresh token; the cookie wins over the ``refreshToken`` body field."""

    submitted = request.cookies.get(REFRESH_COOKIE) or refresh_schema.load(_body())["refresh_token"]
    pair = get_session_manager().refresh(RefreshIn(refresh_token=submitted))
    response = envelope(token_pair_schema.dump(pair), "Access token refreshed")
    return set_auth_cookies(
        response, access_token=pair.access_token, refresh_token=pair.refresh_token
    )


@bp.post("/logout")
@require_auth
@timing
def logout():
    get_session_manager().logout(LogoutIn(principal_id=current_principal_id()))
    return clear_auth_cookies(envelope({}, "User logged out successfully"))


# --------------------------------------------------------------------------- #
# Account
# --------------------------------------------------------------------------- #


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    data = password_change_schema.load(_body())
    get_identity_service().change_password(
        PasswordChangeIn(principal_id=current_principal_id(), **data)
    )
    return envelope({}, "Password changed successfully")


@bp.get("/current-user")
@require_auth
@timing
def current_user():
    user = get_identity_service().get_current(current_principal_id())
    return envelope(user_schema.dump(user), "Current user fetched successfully")


@bp.patch("/update-account")
@require_auth
@timing
def update_account():
    data = account_update_schema.load(_body())
    user = get_identity_service().update_account(current_principal_id(), AccountUpdateIn(**data))
    return envelope(user_schema.dump(user), "Account details updated successfully")


@bp.patch("/avatar")
@require_auth
@timing
def update_avatar():
    """Point the avatar at a URL already uploaded to the media host."""

    data = avatar_schema.load(_body())
    user = get_identity_service().update_media(current_principal_id(), avatar=data["avatar"])
    return envelope(user_schema.dump(user), "Avatar image updated successfully")


@bp.patch("/cover-image")
@require_auth
@timing
def update_cover_image():
    data = cover_image_schema.load(_body())
    user = get_identity_service().update_media(
        current_principal_id(), cover_image=data["cover_image"]
    )
    return envelope(user_schema.dump(user), "Cover image updated successfully")
