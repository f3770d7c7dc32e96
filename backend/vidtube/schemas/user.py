"""Account and session schemas.

JSON bodies use camelCase keys (``fullName``, ``refreshToken``...); loaded
data uses the snake_case attribute names the services expect.
"""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validate, validates_schema

# Secrets are taken verbatim
_RAW_KEYS = frozenset({"password", "oldPassword", "newPassword", "refreshToken"})
_NOT_BLANK = validate.Length(min=1)


class _StripStrings(Schema):
    """Trim surrounding whitespace on every string input."""

    class Meta:
        unknown = EXCLUDE

    @pre_load
    def _strip(self, data: Any, **kwargs: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {k: v.strip() if isinstance(v, str) and k not in _RAW_KEYS else v for k, v in data.items()}


class RegisterSchema(_StripStrings):
    """Input payload for account registration."""

    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    full_name = fields.String(
        required=True, data_key="fullName", validate=validate.Length(min=1, max=100)
    )
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    avatar = fields.Url(load_default=None, validate=validate.Length(max=500))
    cover_image = fields.Url(load_default=None, data_key="coverImage", validate=validate.Length(max=500))


class LoginSchema(_StripStrings):
    """Credentials: ``password`` plus ``username`` and/or ``email``."""

    username = fields.String(load_default=None, validate=_NOT_BLANK)
    email = fields.String(load_default=None, validate=_NOT_BLANK)
    password = fields.String(required=True, validate=_NOT_BLANK)

    @validates_schema
    def _require_identifier(self, data: dict[str, Any], **kwargs: Any) -> None:
        if not (data.get("username") or data.get("email")):
            raise ValidationError("username or email is required", field_name="username")


class RefreshSchema(_StripStrings):
    """Body fallback for the refresh token when no cookie is sent."""

    refresh_token = fields.String(load_default=None, data_key="refreshToken")


class PasswordChangeSchema(_StripStrings):
    old_password = fields.String(required=True, data_key="oldPassword", validate=_NOT_BLANK)
    new_password = fields.String(
        required=True, data_key="newPassword", validate=validate.Length(min=1, max=128)
    )


class AccountUpdateSchema(_StripStrings):
    """Both fields are required."""

    full_name = fields.String(
        required=True, data_key="fullName", validate=validate.Length(min=1, max=100)
    )
    email = fields.Email(required=True, validate=validate.Length(max=254))


class AvatarSchema(_StripStrings):
    avatar = fields.Url(required=True, validate=validate.Length(max=500))


class CoverImageSchema(_StripStrings):
    cover_image = fields.Url(required=True, data_key="coverImage", validate=validate.Length(max=500))


class UserSchema(Schema):
    """Public representation of a principal; never includes secrets or tokens."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    full_name = fields.String(data_key="fullName")
    avatar = fields.String(allow_none=True)
    cover_image = fields.String(allow_none=True, data_key="coverImage")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class TokenPairSchema(Schema):
    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")


class SessionSchema(TokenPairSchema):
    """Login response body: the principal plus both tokens."""

    user = fields.Nested(UserSchema, attribute="principal")
