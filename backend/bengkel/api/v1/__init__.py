"""
API v1 Routes
Progetto: Bengkel Manager (Gestionale Officina)

Router versione 1 dell'API.
"""

from fastapi import APIRouter

from bengkel.api.v1 import (
    auth, customers, dashboard, invoices, packages, services, spareparts, vehicles, workshops
)

# Router aggregato per v1
api_v1_router = APIRouter(prefix="/api/v1")

# Includi i router dei moduli
api_v1_router.include_router(auth.router)
api_v1_router.include_router(workshops.router)
api_v1_router.include_router(services.router)
api_v1_router.include_router(spareparts.router)
api_v1_router.include_router(packages.router)
api_v1_router.include_router(vehicles.router)
api_v1_router.include_router(customers.router)
api_v1_router.include_router(invoices.router)
api_v1_router.include_router(dashboard.router)

# Esportazione
__all__ = ["api_v1_router"]
