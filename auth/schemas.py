"""JWT token payload schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class DecodedToken(BaseModel):
    """JWT token payload structure."""

    sub: str  # user_id (standard JWT claim)
    first_name: str
    last_name: str
    email: str
    role: str  # Kept as a raw string; unknown roles are rejected by policy, not by parsing
    iat: datetime  # Issued-at (standard JWT claim)
    exp: datetime  # Expiration time (standard JWT claim)

    @property
    def user_id(self) -> UUID:
        return UUID(self.sub)
