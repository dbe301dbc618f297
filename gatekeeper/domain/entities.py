from dataclasses import dataclass
from typing import Literal

from gatekeeper.domain.errors import InvalidStatusTransition

Role = Literal["subscriber", "administrator"]
Status = Literal["pending", "active"]


@dataclass
class User:
    id: str | None = None
    username: str = ""
    email: str | None = None
    first_name: str = ""
    last_name: str = ""
    role: Role = "subscriber"
    status: Status = "pending"

    def __post_init__(self):
        if self.email:
            self.email = self.email.strip().lower()
            if not self.email:
                raise ValueError("email cannot be empty")
        else:
            raise ValueError("email is required")
        self.username = self.username.strip()

    @property
    def display_name(self) -> str:
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.username or self.email

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def is_privileged(self) -> bool:
        return self.role == "administrator"

    def activate(self):
        if self.status != "pending":
            raise InvalidStatusTransition()
        self.status = "active"


@dataclass(frozen=True)
class Session:
    user_id: str
    role: Role = "subscriber"

    @property
    def is_privileged(self) -> bool:
        return self.role == "administrator"


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    body: str
