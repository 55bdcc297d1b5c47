from .dto import BusinessProfileOut
from .service import BusinessService

__all__ = ["BusinessProfileOut", "BusinessService"]
