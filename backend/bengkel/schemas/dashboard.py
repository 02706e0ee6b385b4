"""
Schemas Pydantic per la dashboard
Progetto: Bengkel Manager (Gestionale Officina)
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from bengkel.schemas.invoice import InvoiceSummary


class DashboardStats(BaseModel):
    """Contatori e ultime fatture."""

    workshops: int = 0
    vehicles: int = 0
    services: int = 0
    packages: int = 0
    spareparts: int = 0
    invoices: int = 0
    customers: Optional[int] = Field(
        None,
        description="Numero clienti (solo per owner e staff)",
    )
    total_revenue: Decimal = Decimal("0")
    total_revenue_display: str = ""
    recent_invoices: List[InvoiceSummary] = Field(default_factory=list)
