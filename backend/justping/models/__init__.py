from justping.models.business import Business
from justping.models.business_user import BusinessUser, CredentialState, business_user_role
from justping.models.role import ADMIN_PERMISSIONS, ADMIN_ROLE_NAME, PermissionMap, Role
from justping.models.token_blacklist import TokenBlacklist

__all__ = [
    "ADMIN_PERMISSIONS",
    "ADMIN_ROLE_NAME",
    "Business",
    "BusinessUser",
    "CredentialState",
    "PermissionMap",
    "Role",
    "TokenBlacklist",
    "business_user_role",
]
