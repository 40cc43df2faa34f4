from tessera_identity.domain.user.services.user_domain_service import (
    UserDomainService,
)

__all__ = ["UserDomainService"]
