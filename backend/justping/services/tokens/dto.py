# justping/services/tokens/dto.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

REFRESH_TOKEN_TYPE = "refresh"
ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    :param expires_in: Access-token lifetime in seconds.
    :type expires_in: int
    """

    access_token: str
    refresh_token: str
    expires_in: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
        }


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """
    Token emission configuration, as duration strings (``"15m"``, ``"1h"``, ``"7d"``).

    :param access_expires_in: Access token lifetime.
    :type access_expires_in: str
    :param refresh_expires_in: Refresh token lifetime.
    :type refresh_expires_in: str
    """

    access_expires_in: str = "1h"
    refresh_expires_in: str = "7d"
