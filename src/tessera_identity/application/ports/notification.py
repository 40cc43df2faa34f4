"""Outbound notification port.

Implementations deliver messages (email, queue, ...) and receive only
the recipient address, a display name and an opaque token.
"""

from abc import ABC, abstractmethod


class NotificationService(ABC):
    @abstractmethod
    async def send_email_verification(self, to: str, name: str, token: str) -> None:
        pass

    @abstractmethod
    async def send_password_reset(self, to: str, name: str, token: str) -> None:
        pass

    @abstractmethod
    async def send_password_changed(self, to: str, name: str) -> None:
        pass
