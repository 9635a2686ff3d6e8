"""
Pydantic result models returned by repository aggregate and auth operations.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SquadRecord(BaseModel):
    """Win/loss/draw tally for a squad."""

    wins: int = Field(0, ge=0, description="Games where points for > points against")
    losses: int = Field(0, ge=0, description="Games where points for < points against")
    draws: int = Field(0, ge=0, description="Games with level scores")

    @property
    def played(self) -> int:
        return self.wins + self.losses + self.draws

    def as_tuple(self) -> tuple[int, int, int]:
        return self.wins, self.losses, self.draws


class CredentialStatus(str, Enum):
    OK = "ok"
    UNKNOWN_USER = "unknown_user"
    WRONG_PASSWORD = "wrong_password"
    DISABLED = "disabled"


class CredentialCheck(BaseModel):
    """Outcome of a username/password verification."""

    status: CredentialStatus = Field(..., description="Verification outcome")
    user_id: Optional[int] = Field(None, description="Matched user, when one exists")

    @property
    def is_valid(self) -> bool:
        return self.status is CredentialStatus.OK
