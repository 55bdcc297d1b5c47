from .dto import BusinessProfileIn, RegistrationIn, RegistrationOut
from .service import RegistrationService

__all__ = ["BusinessProfileIn", "RegistrationIn", "RegistrationOut", "RegistrationService"]
