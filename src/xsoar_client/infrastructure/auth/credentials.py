"""
XSOAR 8.x / XSIAM API-key authentication.

Advanced API keys are sent as two headers: the key id in ``x-xdr-auth-id``
and the key itself in ``Authorization``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import MutableMapping

AUTH_ID_HEADER = "x-xdr-auth-id"
AUTHORIZATION_HEADER = "Authorization"


@dataclass(frozen=True)
class Credentials:
    """API key id and secret; the secret is kept out of ``repr``."""

    key_id: str = ""
    api_key: str = field(default="", repr=False)

    @property
    def valid(self) -> bool:
        return bool(self.key_id and self.api_key)

    def apply(self, headers: MutableMapping[str, str]) -> None:
        """Write the authentication headers into *headers*."""
        headers[AUTH_ID_HEADER] = self.key_id
        headers[AUTHORIZATION_HEADER] = self.api_key
