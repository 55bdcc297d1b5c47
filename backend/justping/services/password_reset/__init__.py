from .service import GENERIC_RESET_MESSAGE, PasswordResetService

__all__ = ["GENERIC_RESET_MESSAGE", "PasswordResetService"]
