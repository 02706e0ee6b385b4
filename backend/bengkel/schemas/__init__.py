"""
Schemas Pydantic per il progetto Bengkel Manager

Questo modulo contiene tutti gli schemi Pydantic utilizzati per la validazione
e serializzazione delle richieste e risposte API.
"""

from bengkel.schemas.token import TokenPayload, TokenRefresh, TokenResponse
from bengkel.schemas.user import (
    CustomerRead,
    CustomerUpdate,
    ProfileRead,
    ProfileUpdate,
    RoleUpdate,
    UserCreate,
    UserLogin,
    UserResponse,
)
from bengkel.schemas.workshop import WorkshopCreate, WorkshopRead, WorkshopUpdate
from bengkel.schemas.catalog import (
    BundleEntry,
    BundleEntryRead,
    PackageCreate,
    PackageRead,
    PackageUpdate,
    ServiceCreate,
    ServiceRead,
    ServiceUpdate,
    SparepartCreate,
    SparepartRead,
    SparepartUpdate,
)
from bengkel.schemas.vehicle import (
    OwnerProfile,
    VehicleCreate,
    VehicleList,
    VehicleRead,
    VehicleUpdate,
    VehicleWithOwner,
)
from bengkel.schemas.invoice import (
    AddItemRequest,
    AddItemResponse,
    DraftLine,
    InvoiceDetail,
    InvoiceDraft,
    InvoiceDraftLoaded,
    InvoiceLineRead,
    InvoiceList,
    InvoiceSummary,
    InvoiceTotals,
    RemoveLineRequest,
    TotalsRequest,
)
from bengkel.schemas.dashboard import DashboardStats

__all__ = [
    # Auth
    "TokenPayload",
    "TokenRefresh",
    "TokenResponse",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    # Customers
    "CustomerRead",
    "CustomerUpdate",
    "ProfileRead",
    "ProfileUpdate",
    "RoleUpdate",
    # Workshop
    "WorkshopCreate",
    "WorkshopRead",
    "WorkshopUpdate",
    # Catalog
    "BundleEntry",
    "BundleEntryRead",
    "PackageCreate",
    "PackageRead",
    "PackageUpdate",
    "ServiceCreate",
    "ServiceRead",
    "ServiceUpdate",
    "SparepartCreate",
    "SparepartRead",
    "SparepartUpdate",
    # Vehicle
    "OwnerProfile",
    "VehicleCreate",
    "VehicleList",
    "VehicleRead",
    "VehicleUpdate",
    "VehicleWithOwner",
    # Invoice
    "AddItemRequest",
    "AddItemResponse",
    "DraftLine",
    "InvoiceDetail",
    "InvoiceDraft",
    "InvoiceDraftLoaded",
    "InvoiceLineRead",
    "InvoiceList",
    "InvoiceSummary",
    "InvoiceTotals",
    "RemoveLineRequest",
    "TotalsRequest",
    # Dashboard
    "DashboardStats",
]
