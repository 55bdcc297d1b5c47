"""Business profile schemas."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema


class BusinessUpdateSchema(Schema):
    """Partial update of the caller's business; unknown keys are rejected."""

    name = fields.String(validate=validate.Length(min=1, max=255))
    description = fields.String(allow_none=True)
    website = fields.Url(allow_none=True, validate=validate.Length(max=255))
    industry = fields.String(allow_none=True, validate=validate.Length(max=100))
    contact_info = fields.Dict(keys=fields.String())

    @validates_schema
    def _not_empty(self, data, **kwargs):
        if not data:
            raise ValidationError("At least one field is required.")
