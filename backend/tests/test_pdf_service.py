"""
Test per la stampa HTML delle fatture.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from bengkel.models import ItemKind
from bengkel.schemas.invoice import InvoiceDetail, InvoiceLineRead, VehicleInfo
from bengkel.schemas.vehicle import OwnerProfile
from bengkel.services.pdf_service import pdf_service


def _detail(**kwargs):
    owner_id = uuid.uuid4()
    data = dict(
        id=uuid.uuid4(),
        invoice_number="INV/20240501/AB12",
        invoice_date=date(2024, 5, 1),
        vehicle=VehicleInfo(id=uuid.uuid4(), user_id=owner_id, plate_number="B 1234 XYZ", brand="Honda"),
        workshop=None,
        discount=Decimal("0"),
        total_amount=Decimal("180000"),
        created_at=datetime(2024, 5, 1, 10, 0),
        owner=OwnerProfile(user_id=owner_id, name="Budi Santoso", address="Jl. Merdeka 1"),
        lines=[
            InvoiceLineRead(
                id=uuid.uuid4(),
                item_kind=ItemKind.PACKAGE,
                item_id=uuid.uuid4(),
                display_name="[Paket] Paket A",
                quantity=1,
                subtotal=Decimal("150000"),
            ),
            InvoiceLineRead(
                id=uuid.uuid4(),
                display_name="Unknown Item",
                quantity=1,
                subtotal=Decimal("30000"),
            ),
        ],
        subtotal=Decimal("180000"),
    )
    data.update(kwargs)
    return InvoiceDetail(**data)


class TestInvoiceHtml:

    def test_render_contains_lines_and_totals(self):
        html = pdf_service.render_invoice_html(_detail())

        assert "INV/20240501/AB12" in html
        assert "[Paket] Paket A" in html
        assert "Unknown Item" in html
        assert "Rp 180.000" in html
        assert "Budi Santoso" in html
        assert "B 1234 XYZ" in html

    def test_discount_row_only_when_present(self):
        assert "Diskon" not in pdf_service.render_invoice_html(_detail())

        html = pdf_service.render_invoice_html(
            _detail(discount=Decimal("200000"), total_amount=Decimal("0"))
        )
        assert "Diskon" in html
        assert "Rp 0" in html

    def test_notes_are_escaped(self):
        html = pdf_service.render_invoice_html(_detail(notes="<b>cek rem</b>"))

        assert "&lt;b&gt;cek rem&lt;/b&gt;" in html
