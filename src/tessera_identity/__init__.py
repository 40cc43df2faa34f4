"""Tessera Identity - users, roles, authorization and identity use cases.

This package handles all identity-related concerns:
- User aggregate and role hierarchy
- Role-based permissions and authorization decisions
- Authentication use cases (login, registration, tokens)
- Password management (change, reset)

Import from the subpackages directly, e.g.
``tessera_identity.domain.user`` or ``tessera_identity.application``.
The package root stays import-free because tessera_auth builds on
``tessera_identity.domain.shared``.
"""
