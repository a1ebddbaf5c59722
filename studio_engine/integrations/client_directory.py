"""
Client and service lookups needed to address notifications.

In production these are joins against the profiles and services tables.
"""

from typing import Optional, Protocol

from studio_engine.schemas.client_schema import ClientProfile, EmailRecipient


class ClientDirectory(Protocol):
    async def get_email_recipient(self, client_id: str) -> Optional[EmailRecipient]: ...

    async def get_service_name(self, service_id: int) -> Optional[str]: ...


class InMemoryClientDirectory:
    """Dict-backed profiles and service catalog."""

    def __init__(
        self,
        clients: Optional[list[ClientProfile]] = None,
        services: Optional[dict[int, str]] = None,
    ) -> None:
        self._clients: dict[str, ClientProfile] = {c.id: c for c in clients or []}
        self._services: dict[int, str] = dict(services or {})

    def add_client(self, profile: ClientProfile) -> None:
        self._clients[profile.id] = profile

    def add_service(self, service_id: int, name: str) -> None:
        self._services[service_id] = name

    def get_client(self, client_id: str) -> Optional[ClientProfile]:
        return self._clients.get(client_id)

    async def get_email_recipient(self, client_id: str) -> Optional[EmailRecipient]:
        """Return the address to email, or None if missing or opted out."""
        profile = self._clients.get(client_id)
        if profile is None or not profile.email or not profile.notify_email:
            return None
        return EmailRecipient(email=profile.email, first_name=profile.first_name)

    async def get_service_name(self, service_id: int) -> Optional[str]:
        return self._services.get(service_id)
