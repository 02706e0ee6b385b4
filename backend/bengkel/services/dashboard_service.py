"""
Service per le statistiche della dashboard
Progetto: Bengkel Manager (Gestionale Officina)
"""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.models import Invoice, Package, Profile, Service, Sparepart, User, Vehicle, Workshop
from bengkel.schemas.dashboard import DashboardStats
from bengkel.services.invoice_builder import format_currency
from bengkel.services.invoice_service import invoice_service

logger = logging.getLogger(__name__)

RECENT_INVOICES_LIMIT = 5


class DashboardService:
    """Contatori, incasso totale e ultime fatture."""

    async def _count(self, db: AsyncSession, model, *conditions) -> int:
        query = select(func.count()).select_from(model)
        if conditions:
            query = query.where(*conditions)
        result = await db.execute(query)
        return result.scalar() or 0

    async def get_stats(self, db: AsyncSession, current_user: User) -> DashboardStats:
        """
        Statistiche visibili all'utente.

        Per un cliente veicoli, fatture e incasso riguardano solo i propri
        veicoli e il numero clienti non viene esposto.
        """
        is_staff = current_user.is_staff_or_owner

        vehicle_filter = [] if is_staff else [Vehicle.user_id == current_user.id]

        revenue_query = select(func.coalesce(func.sum(Invoice.total_amount), 0))
        invoice_count_query = select(func.count(Invoice.id))
        if not is_staff:
            own_vehicles = select(Vehicle.id).where(Vehicle.user_id == current_user.id)
            revenue_query = revenue_query.where(Invoice.vehicle_id.in_(own_vehicles))
            invoice_count_query = invoice_count_query.where(Invoice.vehicle_id.in_(own_vehicles))

        revenue_result = await db.execute(revenue_query)
        total_revenue = Decimal(revenue_result.scalar() or 0)

        invoice_count_result = await db.execute(invoice_count_query)
        invoices = invoice_count_result.scalar() or 0

        recent, _ = await invoice_service.get_all(
            db, current_user, limit=RECENT_INVOICES_LIMIT
        )

        stats = DashboardStats(
            workshops=await self._count(db, Workshop),
            vehicles=await self._count(db, Vehicle, *vehicle_filter),
            services=await self._count(db, Service),
            packages=await self._count(db, Package),
            spareparts=await self._count(db, Sparepart),
            invoices=invoices,
            customers=await self._count(db, Profile) if is_staff else None,
            total_revenue=total_revenue,
            total_revenue_display=format_currency(total_revenue),
            recent_invoices=recent,
        )

        logger.debug(f"Statistiche dashboard per {current_user.id}: {stats.invoices} fatture")
        return stats


dashboard_service = DashboardService()
