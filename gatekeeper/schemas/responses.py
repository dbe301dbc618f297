from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from gatekeeper.domain.entities import User


class ApiResponse(BaseModel):
    """Envelope shared by every endpoint, errors included."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[dict[str, Any]] = None


class ProfileOut(BaseModel):
    id: str = Field(..., description="The id of the user")
    username: str
    email: str = Field(..., description="The email of the user")
    first_name: str
    last_name: str
    display_name: str
    role: Literal["subscriber", "administrator"]
    status: Literal["pending", "active"]

    @classmethod
    def from_user(cls, user: User) -> "ProfileOut":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            display_name=user.display_name,
            role=user.role,
            status=user.status,
        )


class HealthOut(BaseModel):
    status: Literal["ok"] = "ok"
