"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates_schema

PASSWORD_MISMATCH = "Passwords must match"


class BusinessInputSchema(Schema):
    """Tenant attributes supplied at sign-up."""

    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    description = fields.String(load_default=None, allow_none=True)
    website = fields.Url(load_default=None, allow_none=True, validate=validate.Length(max=255))
    industry = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=100))
    contact_info = fields.Dict(keys=fields.String(), load_default=dict, allow_none=True)


class RegistrantSchema(Schema):
    """The first (Admin) user of a new business."""

    class Meta:
        # Older clients still send ``password``; the credential is set through the emailed link.
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=254))
    first_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    last_name = fields.String(required=True, validate=validate.Length(min=1, max=100))


class RegisterSchema(Schema):
    """Input payload for business registration."""

    business = fields.Nested(BusinessInputSchema, required=True)
    user = fields.Nested(RegistrantSchema, required=True)


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshTokenSchema(Schema):
    refresh_token = fields.String(required=True, data_key="refreshToken", validate=validate.Length(min=1))


class ForgotPasswordSchema(Schema):
    email = fields.Email(required=True, validate=validate.Length(max=254))


class ResetPasswordSchema(Schema):
    """Input payload for redeeming a reset token."""

    token = fields.String(required=True, validate=validate.Length(min=1, max=256))
    password = fields.String(required=True, validate=validate.Length(max=128))
    confirm_password = fields.String(required=True, data_key="confirmPassword")

    @validates_schema
    def _passwords_match(self, data, **kwargs):
        if data.get("password") != data.get("confirm_password"):
            raise ValidationError(PASSWORD_MISMATCH, "confirmPassword")


class ChangePasswordSchema(Schema):
    """Input payload for an authenticated password change."""

    current_password = fields.String(required=True, data_key="currentPassword")
    new_password = fields.String(required=True, data_key="newPassword", validate=validate.Length(max=128))
    confirm_password = fields.String(required=True, data_key="confirmPassword")

    @validates_schema
    def _passwords_match(self, data, **kwargs):
        if data.get("new_password") != data.get("confirm_password"):
            raise ValidationError(PASSWORD_MISMATCH, "confirmPassword")


class LogoutSchema(Schema):
    all_sessions = fields.Boolean(load_default=False, data_key="allSessions")
