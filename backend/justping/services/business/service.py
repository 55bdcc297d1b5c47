# justping/services/business/service.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from justping.services._shared.base import BaseService
from justping.services._shared.errors import NotFoundError, ValidationFailedError
from justping.services.business.dto import BusinessProfileOut

log = logging.getLogger(__name__)


class BusinessService(BaseService):
    """Read and edit the caller's own business profile."""

    def get_profile(self, business_id: str) -> BusinessProfileOut:
        """
        :raises AuthorizationError: ``business_id`` is not the caller's tenant.
        :raises NotFoundError: Unknown business.
        """
        self.ensure_same_business(business_id)
        with self.ro_uow() as uow:
            business = uow.businesses.get(business_id)
            if business is None:
                raise NotFoundError("Business", business_id, "Business not found")
            return BusinessProfileOut.from_model(business)

    def update_profile(self, business_id: str, fields: Mapping[str, Any]) -> BusinessProfileOut:
        """
        Apply whitelisted profile edits (``name``, ``description``, ``website``,
        ``industry``, ``contact_info``).

        :raises ValidationFailedError: Unknown field or blank name.
        """
        self.ensure_same_business(business_id)
        try:
            with self.rw_uow() as uow:
                business = uow.businesses.get(business_id)
                if business is None:
                    raise NotFoundError("Business", business_id, "Business not found")
                uow.businesses.update(business, **dict(fields))
                out = BusinessProfileOut.from_model(business)
        except ValueError as exc:
            raise ValidationFailedError(str(exc), (str(exc),)) from exc
        log.info(
            "Business profile updated",
            extra={"event": "business_update", "business_id": business_id, "user_id": self.ctx.actor_id},
        )
        return out
