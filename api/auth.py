# File: api/auth.py
"""Authentication collaborator contract"""
from abc import ABC, abstractmethod
from typing import Dict, Optional

from core.exceptions import AuthenticationError


class Authenticator(ABC):
    """Maps a caller credential to an opaque owner id"""

    @abstractmethod
    async def authenticate(self, credential: Optional[str]) -> str:
        """Return the owner id or raise AuthenticationError"""
        pass


class StaticTokenAuthenticator(Authenticator):
    """Bearer tokens configured up front, for local deployments"""

    def __init__(self, tokens: Dict[str, str]):
        self.tokens = dict(tokens)

    async def authenticate(self, credential: Optional[str]) -> str:
        if not credential:
            raise AuthenticationError("Not authorized, no token")

        owner_id = self.tokens.get(credential)
        if owner_id is None:
            raise AuthenticationError("Not authorized, token failed")
        return owner_id


def bearer_token(header_value: Optional[str]) -> Optional[str]:
    if not header_value:
        return None
    scheme, _, token = header_value.strip().partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()
