"""Optional personal details attached to a user."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, fields, replace
from datetime import date
from typing import Any

from tessera_identity.domain.shared.exceptions import ValidationError
from tessera_identity.domain.shared.time import utc_now

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]{10,}$")
MIN_NAME_LENGTH = 2


@dataclass(frozen=True)
class UserProfile:
    """Immutable snapshot of a user's profile."""

    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    @property
    def display_name(self) -> str | None:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else None

    def merge(self, **changes: Any) -> UserProfile:
        """Return a copy with the given fields replaced.

        Raises
        ------
        ValidationError
            If an unknown field is given
        """
        unknown = set(changes) - self.field_names()
        if unknown:
            msg = f"Unknown profile fields: {', '.join(sorted(unknown))}"
            raise ValidationError(msg, details={"fields": sorted(unknown)})
        return replace(self, **changes)

    def errors(self) -> list[str]:
        """Names of the fields that break a profile rule."""
        problems: list[str] = []
        for name in ("first_name", "last_name"):
            value = getattr(self, name)
            if value is not None and len(value.strip()) < MIN_NAME_LENGTH:
                problems.append(name)
        if self.phone is not None and not PHONE_PATTERN.match(self.phone):
            problems.append("phone")
        if self.date_of_birth is not None and self.date_of_birth > utc_now().date():
            problems.append("date_of_birth")
        return problems

    def is_valid(self) -> bool:
        return not self.errors()

    def validate(self) -> None:
        problems = self.errors()
        if problems:
            msg = f"Invalid profile fields: {', '.join(problems)}"
            raise ValidationError(msg, details={"fields": problems})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
