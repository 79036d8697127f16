from __future__ import annotations

from typing import Optional, Protocol

from .model import UserSummary


class UserDirectory(Protocol):
    """Lookup interface over users.

    Note (DIP): the attendance service depends on this interface, not on a
    concrete database.
    """

    def find_user(self, user_id: int) -> Optional[UserSummary]:
        """Return the user unless it is missing or soft-deleted."""

        raise NotImplementedError
