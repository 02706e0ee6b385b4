"""
Modelli SQLAlchemy per account, profilo e ruolo
Progetto: Bengkel Manager (Gestionale Officina)

Il ruolo NON è un attributo del profilo: è un record associato
(una riga per account) che viene sostituito con un upsert per chiave.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bengkel.models import Base
from bengkel.models.mixins import TimestampMixin, UUIDMixin


class AppRole(str, Enum):
    """Ruoli applicativi."""
    OWNER = "owner"
    STAFF = "staff"
    CUSTOMER = "customer"


class User(Base, UUIDMixin, TimestampMixin):
    """
    Account autenticato.

    Attributes:
        id: UUID primary key
        email: Email univoca di login
        hashed_password: Password hashata (bcrypt)
        is_active: Indica se l'account può autenticarsi

    Relationships:
        profile: Anagrafica (1:1)
        role_assignment: Riga ruolo (1:1, può mancare)
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        doc="Email univoca dell'account",
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Password hashata",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        doc="Indica se l'account è attivo",
    )

    profile: Mapped[Optional["Profile"]] = relationship(
        "Profile",
        back_populates="user",
        uselist=False,
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    role_assignment: Mapped[Optional["UserRole"]] = relationship(
        "UserRole",
        back_populates="user",
        uselist=False,
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def role(self) -> str:
        """Ruolo effettivo: 'customer' se non esiste una riga ruolo."""
        if self.role_assignment is None:
            return AppRole.CUSTOMER.value
        return self.role_assignment.role

    @property
    def is_staff_or_owner(self) -> bool:
        """True per i ruoli che gestiscono l'officina."""
        return self.role in (AppRole.OWNER.value, AppRole.STAFF.value)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class Profile(Base, UUIDMixin, TimestampMixin):
    """
    Anagrafica di un account (una per account).

    Attributes:
        user_id: UUID dell'account
        name: Nome visualizzato
        email: Email di contatto
        phone: Telefono (opzionale)
        address: Indirizzo (opzionale)
    """

    __tablename__ = "profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        doc="UUID dell'account",
    )

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="profile")

    __table_args__ = (
        Index("ix_profiles_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Profile(user_id={self.user_id}, name={self.name})>"


class UserRole(Base, UUIDMixin):
    """
    Ruolo assegnato a un account.

    Il vincolo unique su user_id garantisce un solo ruolo per account.
    """

    __tablename__ = "user_roles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        doc="UUID dell'account",
    )

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AppRole.CUSTOMER.value,
        doc="Ruolo: owner, staff, customer",
    )

    user: Mapped["User"] = relationship("User", back_populates="role_assignment")

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role={self.role})>"
