from tessera_identity.application.ports.notification import NotificationService

__all__ = ["NotificationService"]
