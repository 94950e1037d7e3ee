"""
Inbox and Message Models.

Every person and exchange profile has an inbox of messages; unread
messages are those not yet read in the inbox folder, or not yet filed.
"""

import secrets
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hbx_core.core.config import ExchangeSettings, get_exchange_settings
from hbx_core.core.enums import MessageFolder
from hbx_core.models.base import Base, TimeStampedModel, UUIDModel


class Inbox(Base, UUIDModel):
    """Mailbox owned by a person or an exchange profile."""

    __tablename__ = "inboxes"

    person_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("persons.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )
    hbx_profile_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("hbx_profiles.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )
    access_key: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Inbox id followed by 20 random hex characters",
    )

    messages: Mapped[list["Message"]] = relationship(
        back_populates="inbox",
        cascade="all, delete-orphan",
        order_by="Message.position",
        collection_class=ordering_list("position"),
    )

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("id", uuid4())
        kwargs.setdefault("access_key", f"{kwargs['id'].hex}{secrets.token_hex(10)}")
        super().__init__(**kwargs)

    def read_messages(self) -> list["Message"]:
        return [
            m for m in self.messages if m.message_read and m.folder == MessageFolder.INBOX
        ]

    def unread_messages(self) -> list["Message"]:
        """Unread messages in the inbox folder, followed by unread unfiled ones."""
        in_inbox = [
            m for m in self.messages if not m.message_read and m.folder == MessageFolder.INBOX
        ]
        unfiled = [m for m in self.messages if not m.message_read and m.folder is None]
        return in_inbox + unfiled

    def post_message(self, message: "Message") -> "Inbox":
        self.messages.append(message)
        return self

    def delete_message(self, message: "Message") -> "Inbox":
        existing = next((m for m in self.messages if m.id == message.id), None)
        if existing is not None:
            self.messages.remove(existing)
        return self


class Message(Base, UUIDModel, TimeStampedModel):
    """A message delivered to an inbox."""

    __tablename__ = "messages"

    inbox_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("inboxes.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    sender: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, comment="From")
    subject: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    message_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    folder: Mapped[Optional[MessageFolder]] = mapped_column(
        Enum(MessageFolder),
        nullable=True,
        default=MessageFolder.INBOX,
    )

    inbox: Mapped[Optional[Inbox]] = relationship(back_populates="messages")

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("id", uuid4())
        kwargs.setdefault("message_read", False)
        kwargs.setdefault("folder", MessageFolder.INBOX)
        super().__init__(**kwargs)

    def mark_read(self) -> None:
        self.message_read = True


def build_welcome_inbox(settings: Optional[ExchangeSettings] = None) -> Inbox:
    """New inbox holding the exchange's welcome message."""
    settings = settings or get_exchange_settings()
    site = settings.SITE_SHORT_NAME
    inbox = Inbox()
    inbox.post_message(
        Message(
            subject=f"Welcome to {site}",
            body=(
                f"{site} is the {settings.ACA_STATE_NAME}'s on-line marketplace to shop, "
                "compare, and select health insurance that meets your health needs and budgets."
            ),
            sender=site,
        )
    )
    return inbox
