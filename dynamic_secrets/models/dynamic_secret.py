from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dynamic_secrets.core.crypto import EncryptedPayload

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .dynamic_secret_lease import DynamicSecretLease

SLUG_MAX_LENGTH = 64


class DynamicSecretState(str, enum.Enum):
    ACTIVE = "active"
    DELETING = "deleting"


class DynamicSecret(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Provider-backed dynamic secret configuration.

    Provider input is stored only in encrypted form; the five ``input_*`` /
    ``algorithm`` / ``key_encoding`` columns are always written together.
    """

    __tablename__ = "dynamic_secret"
    __table_args__ = (
        UniqueConstraint("folder_id", "slug", name="uq_dynamic_secret_folder_id_slug"),
    )

    folder_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True, comment="owning folder")
    slug: Mapped[str] = mapped_column(String(SLUG_MAX_LENGTH), nullable=False, comment="unique within folder")
    type: Mapped[str] = mapped_column(String(40), nullable=False, comment="provider type")
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, comment="stored input schema version")

    input_ciphertext: Mapped[str] = mapped_column(Text, nullable=False)
    input_iv: Mapped[str] = mapped_column(String(64), nullable=False)
    input_tag: Mapped[str] = mapped_column(String(64), nullable=False)
    algorithm: Mapped[str] = mapped_column(String(32), nullable=False)
    key_encoding: Mapped[str] = mapped_column(String(16), nullable=False)

    default_ttl: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="seconds")
    max_ttl: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="seconds")

    is_deleting: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
        index=True,
    )

    leases: Mapped[list["DynamicSecretLease"]] = relationship(
        back_populates="dynamic_secret",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    @property
    def state(self) -> DynamicSecretState:
        return DynamicSecretState.DELETING if self.is_deleting else DynamicSecretState.ACTIVE

    @property
    def encrypted_input(self) -> EncryptedPayload:
        return EncryptedPayload(
            ciphertext=self.input_ciphertext,
            iv=self.input_iv,
            tag=self.input_tag,
            algorithm=self.algorithm,
            encoding=self.key_encoding,
        )

    def __repr__(self) -> str:
        return f"<DynamicSecret id={self.id} slug={self.slug!r} type={self.type!r} state={self.state.value}>"


def encrypted_columns(payload: EncryptedPayload) -> dict[str, str]:
    """Map a codec payload onto the column set, always as a whole."""
    return {
        "input_ciphertext": payload.ciphertext,
        "input_iv": payload.iv,
        "input_tag": payload.tag,
        "algorithm": payload.algorithm,
        "key_encoding": payload.encoding,
    }
