"""Convenience exports for application schemas."""

from __future__ import annotations

from .user import (
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

__all__ = [
    "RegisterSchema",
    "LoginSchema",
    "RefreshSchema",
    "PasswordChangeSchema",
    "AccountUpdateSchema",
    "AvatarSchema",
    "CoverImageSchema",
    "UserSchema",
    "TokenPairSchema",
    "SessionSchema",
]
