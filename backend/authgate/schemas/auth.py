"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates_schema

PHONE_PATTERN = r"^\d{11}$"


class RegisterSchema(Schema):
    """
    Input payload for self-service registration.

    Profile-shape rules (names vs organization) are enforced by the service.
    """

    class Meta:
        unknown = EXCLUDE

    is_organization = fields.Boolean(required=True)
    first_name = fields.String(load_default=None, validate=validate.Length(max=255))
    last_name = fields.String(load_default=None, validate=validate.Length(max=255))
    organization_name = fields.String(load_default=None, validate=validate.Length(max=255))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    phone = fields.String(
        required=True,
        validate=validate.Regexp(PHONE_PATTERN, error="The phone must be 11 digits."),
    )
    password = fields.String(required=True, validate=validate.Length(min=6, max=128))
    password_confirmation = fields.String(required=True, load_only=True)
    dob = fields.Date(load_default=None)
    date_founded = fields.Date(load_default=None)

    @validates_schema
    def _passwords_match(self, data: dict[str, Any], **kwargs: Any) -> None:
        if data.get("password") != data.get("password_confirmation"):
            raise ValidationError(
                "The password confirmation does not match.", field_name="password"
            )


class LoginSchema(Schema):
    """Input payload for authenticating with email *or* phone."""

    class Meta:
        unknown = EXCLUDE

    login = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class ChangePasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    current_password = fields.String(required=True)
    new_password = fields.String(required=True, validate=validate.Length(min=6, max=128))
    new_password_confirmation = fields.String(required=True, load_only=True)

    @validates_schema
    def _passwords_match(self, data: dict[str, Any], **kwargs: Any) -> None:
        if data.get("new_password") != data.get("new_password_confirmation"):
            raise ValidationError(
                "The new password confirmation does not match.", field_name="new_password"
            )


class UserSchema(Schema):
    """Public representation of an account. Never includes the password hash."""

    id = fields.Integer(dump_only=True)
    first_name = fields.String(allow_none=True)
    last_name = fields.String(allow_none=True)
    organization_name = fields.String(allow_none=True)
    display_name = fields.String(dump_only=True)
    email = fields.Email()
    phone = fields.String(allow_none=True)
    is_organization = fields.Boolean()
    dob = fields.Date(allow_none=True)
    date_founded = fields.Date(allow_none=True)
    profile_image = fields.String(allow_none=True)
    role = fields.String()
    email_verified_at = fields.DateTime(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
