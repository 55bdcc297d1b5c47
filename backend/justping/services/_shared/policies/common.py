def is_same_business(*, actor_business_id, business_id) -> bool:
    """Return True if the actor is scoped to the given business."""
    if actor_business_id is None:
        return False
    return str(actor_business_id) == str(business_id)
