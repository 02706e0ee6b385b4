"""
Test per DashboardService: contatori e incasso filtrati per ruolo.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from bengkel.services.dashboard_service import dashboard_service


def _sql(mock_db, index):
    """SQL della index-esima query eseguita sulla sessione mock."""
    return str(mock_db.execute.await_args_list[index].args[0])


def _stats_results(make_result, revenue, invoices, counts):
    return [
        make_result(scalar=revenue),
        make_result(scalar=invoices),
        *[make_result(scalar=count) for count in counts],
    ]


@pytest.fixture
def recent_invoices():
    with patch(
        "bengkel.services.dashboard_service.invoice_service.get_all",
        new_callable=AsyncMock,
        return_value=([], 0),
    ) as get_all:
        yield get_all


class TestDashboardStats:

    @pytest.mark.asyncio
    async def test_staff_sees_global_totals(self, mock_db, make_result, staff_user, recent_invoices):
        """Test owner/staff: contatori globali e numero clienti."""
        mock_db.execute.side_effect = _stats_results(
            make_result, Decimal("1250000"), 12, [2, 30, 8, 3, 40, 25]
        )

        stats = await dashboard_service.get_stats(mock_db, staff_user)

        assert stats.total_revenue == Decimal("1250000")
        assert stats.total_revenue_display == "Rp 1.250.000"
        assert stats.invoices == 12
        assert (stats.workshops, stats.vehicles, stats.services) == (2, 30, 8)
        assert (stats.packages, stats.spareparts) == (3, 40)
        assert stats.customers == 25

        assert mock_db.execute.await_count == 8
        assert "vehicles" not in _sql(mock_db, 0)
        assert "user_id" not in _sql(mock_db, 3)
        recent_invoices.assert_awaited_once_with(mock_db, staff_user, limit=5)

    @pytest.mark.asyncio
    async def test_customer_sees_only_own_data(self, mock_db, make_result, customer_user, recent_invoices):
        """Test cliente: incasso, fatture e veicoli propri, nessun numero clienti."""
        mock_db.execute.side_effect = _stats_results(
            make_result, Decimal("150000"), 1, [2, 1, 8, 3, 40]
        )

        stats = await dashboard_service.get_stats(mock_db, customer_user)

        assert stats.customers is None
        assert stats.total_revenue == Decimal("150000")
        assert stats.invoices == 1
        assert stats.vehicles == 1

        # Nessuna query sui profili
        assert mock_db.execute.await_count == 7
        revenue_sql = _sql(mock_db, 0)
        assert "invoices.vehicle_id IN" in revenue_sql
        assert "vehicles.user_id" in revenue_sql
        assert "vehicles.user_id" in _sql(mock_db, 1)
        assert "vehicles.user_id" in _sql(mock_db, 3)
        recent_invoices.assert_awaited_once_with(mock_db, customer_user, limit=5)

    @pytest.mark.asyncio
    async def test_empty_database(self, mock_db, make_result, owner_user, recent_invoices):
        mock_db.execute.side_effect = _stats_results(make_result, None, None, [None] * 6)

        stats = await dashboard_service.get_stats(mock_db, owner_user)

        assert stats.total_revenue == Decimal("0")
        assert stats.total_revenue_display == "Rp 0"
        assert stats.invoices == 0
        assert stats.customers == 0
        assert stats.recent_invoices == []
