"""Business profile endpoints scoped to the caller's tenant."""

from __future__ import annotations

from flask import Blueprint, request

from justping.api.deps import (
    business_service,
    current_auth,
    require_auth,
    require_permission,
    success,
    timing,
)
from justping.schemas import BusinessUpdateSchema

bp = Blueprint("business", __name__)

update_schema = BusinessUpdateSchema()


@bp.get("/profile")
@require_auth
@require_permission("business.read")
@timing
def get_profile():
    profile = business_service().get_profile(current_auth().business_id)
    return success(profile.as_dict())


@bp.put("/profile")
@require_auth
@require_permission("business.update")
@timing
def update_profile():
    """Apply a partial update to the caller's business."""

    fields = update_schema.load(request.get_json(silent=True) or {})
    profile = business_service().update_profile(current_auth().business_id, fields)
    return success(profile.as_dict(), message="Business profile updated")
