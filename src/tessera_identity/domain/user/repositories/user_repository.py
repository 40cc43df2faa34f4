"""User repository interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Union
from uuid import UUID

from tessera_identity.domain.user.aggregates.user import User
from tessera_identity.domain.user.value_objects import Email, UserRole


@dataclass(frozen=True)
class UserQuery:
    """Filters and paging for listing users."""

    page: int = 1
    limit: int = 20
    search: str | None = None
    role: UserRole | None = None
    is_active: bool | None = None
    email_verified: bool | None = None
    sort_by: str = "created_at"
    descending: bool = True

    def __post_init__(self) -> None:
        if self.page < 1:
            msg = "page must be >= 1"
            raise ValueError(msg)
        if not 1 <= self.limit <= 100:
            msg = "limit must be between 1 and 100"
            raise ValueError(msg)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class UserPage:
    """One page of users plus the total match count."""

    items: list[User] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


class UserRepository(ABC):
    """Repository interface for User aggregates."""

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        """Find a user by their ID."""

    @abstractmethod
    async def find_by_email(self, email: Union[str, Email]) -> Optional[User]:
        """Find a user by their email address."""

    @abstractmethod
    async def exists_by_email(
        self,
        email: Union[str, Email],
        exclude_id: UUID | None = None,
    ) -> bool:
        """Check if another user exists with the given email."""

    @abstractmethod
    async def save(self, user: User) -> None:
        """Save or update a user."""

    @abstractmethod
    async def find_many(self, query: UserQuery) -> UserPage:
        """List users matching a query."""

    @abstractmethod
    async def delete(self, user_id: UUID) -> bool:
        """Delete a user by ID; False if it did not exist."""

    @abstractmethod
    async def count(self) -> int:
        """Count total users."""
