from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class UserSummary:
    """Read-only view of a directory user.

    Carries the display fields denormalized into attendance listings.
    """

    user_id: int
    first_name: str
    last_name: str
    email: str
    emp_id: Optional[str]
    role: Role = Role.EMPLOYEE
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_display(self) -> dict:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "empId": self.emp_id,
        }
