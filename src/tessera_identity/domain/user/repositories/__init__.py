from tessera_identity.domain.user.repositories.user_repository import (
    UserPage,
    UserQuery,
    UserRepository,
)

__all__ = ["UserPage", "UserQuery", "UserRepository"]
