from enum import Enum


class UserStatus(str, Enum):
    """Account activation state."""

    ACTIVE = "active"
    INACTIVE = "inactive"
