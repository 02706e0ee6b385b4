"""
Modelli Database SQLAlchemy
Progetto: Bengkel Manager (Gestionale Officina)

Import centralizzato di tutti i modelli:
- User, Profile, UserRole: account, anagrafica e ruolo
- Workshop: officine
- Service, Sparepart, Package, PackageSparepart: catalogo
- Vehicle: veicoli dei clienti
- Invoice, InvoiceLine: fatture e righe
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class per tutti i modelli SQLAlchemy."""
    pass


from bengkel.models.user import AppRole, Profile, User, UserRole
from bengkel.models.workshop import Workshop
from bengkel.models.catalog import Package, PackageSparepart, Service, Sparepart
from bengkel.models.vehicle import Vehicle
from bengkel.models.invoice import Invoice, InvoiceLine, ItemKind

__all__ = [
    "Base",
    "AppRole",
    "User",
    "Profile",
    "UserRole",
    "Workshop",
    "Service",
    "Sparepart",
    "Package",
    "PackageSparepart",
    "Vehicle",
    "Invoice",
    "InvoiceLine",
    "ItemKind",
]
