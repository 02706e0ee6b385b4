"""
Colonne comuni ai modelli
Progetto: Bengkel Manager (Gestionale Officina)
"""

import datetime
import uuid

from sqlalchemy import DateTime, Uuid, event
from sqlalchemy.orm import Mapped, Session, mapped_column
from sqlalchemy.sql import func


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class UUIDMixin:
    """Chiave primaria UUID assegnata alla creazione dell'oggetto Python."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """
    created_at / updated_at.

    created_at è assegnato dal database; updated_at è riscritto prima di
    ogni flush che modifica le colonne della riga (vedi touch_updated_at).
    """

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


@event.listens_for(Session, "before_flush")
def touch_updated_at(session: Session, flush_context, instances) -> None:
    now = utcnow()
    changed = [
        obj for obj in session.dirty
        if session.is_modified(obj, include_collections=False)
    ]
    for obj in [*session.new, *changed]:
        if isinstance(obj, TimestampMixin):
            obj.updated_at = now
