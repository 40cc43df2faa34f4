"""
Pytest configuration for tessera_identity tests.

This conftest provides fixtures specific to the identity domain
(users, roles, authorization).
"""

import pytest

from tessera_identity.domain.user import User, UserRole
from tests.shared.fixtures.factories import UserFactory


@pytest.fixture
def test_user() -> User:
    """Create a standard test user."""
    return UserFactory.user()


@pytest.fixture
def other_user() -> User:
    """A second plain user."""
    return UserFactory.user(email="other@example.com")


@pytest.fixture
def admin_user() -> User:
    """Create an admin test user."""
    return UserFactory.admin()


@pytest.fixture
def other_admin() -> User:
    return UserFactory.admin(email="admin2@example.com")


@pytest.fixture
def system_admin() -> User:
    """Create a system admin test user."""
    return UserFactory.system_admin()


@pytest.fixture
def user_role() -> UserRole:
    """Standard user role."""
    return UserRole.USER
