from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import UserStatus
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def create(self, user: User) -> None:
        raise NotImplementedError

    def update(self, user: User) -> bool:
        raise NotImplementedError

    def set_status(self, user_id: str, status: UserStatus) -> bool:
        raise NotImplementedError

    def set_competencies(self, user_id: str, competency_ids: Sequence[str]) -> None:
        raise NotImplementedError

    def remove_competency_everywhere(self, competency_id: str) -> int:
        raise NotImplementedError

    def touch_last_login(self, user_id: str, when: datetime) -> None:
        raise NotImplementedError

    def delete_by_id(self, user_id: str) -> bool:
        raise NotImplementedError

    def replace_all(self, users: Sequence[User]) -> None:
        raise NotImplementedError
