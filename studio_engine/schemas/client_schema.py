"""Client profile models used for notification lookups."""

from typing import Optional

from pydantic import BaseModel


class ClientProfile(BaseModel):
    """Client record as held by the studio's profile table."""
    id: str
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notify_email: bool = True

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class EmailRecipient(BaseModel):
    """A client who has an email address and has opted in to email."""
    email: str
    first_name: str
