from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import UUID as SA_UUID
from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dynamic_secrets.utils.time_utils import Datetime

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .dynamic_secret import DynamicSecret


class DynamicSecretLease(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    One issued credential of a dynamic secret.

    Rows are written by the lease issuer; this package only reads them and
    removes them while pruning.
    """

    __tablename__ = "dynamic_secret_lease"

    dynamic_secret_id: Mapped[uuid.UUID] = mapped_column(
        SA_UUID(as_uuid=True),
        ForeignKey("dynamic_secret.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    external_entity_id: Mapped[str] = mapped_column(String(255), nullable=False, comment="user/key id on the target system")
    expire_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status_details: Mapped[str | None] = mapped_column(Text, nullable=True)

    dynamic_secret: Mapped["DynamicSecret"] = relationship(back_populates="leases", lazy="raise")

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or Datetime.now()
        return Datetime.ensure_utc(self.expire_at) <= now
