"""
Test per InvoiceService: composizione bozza, salvataggio in un'unica
transazione, sostituzione in modifica e dettaglio per la stampa.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from bengkel.core.exceptions import BusinessValidationError, ConflictError, NotFoundError
from bengkel.models import Invoice, InvoiceLine, ItemKind, Service, Vehicle
from bengkel.schemas.invoice import AddItemRequest, DraftLine, InvoiceDraft
from bengkel.services.invoice_builder import build_lines
from bengkel.services.invoice_service import invoice_service

from conftest import MockProfile, MockUser


def _draft(lines, discount="0", **kwargs):
    return InvoiceDraft(
        workshop_id=kwargs.get("workshop_id", uuid.uuid4()),
        vehicle_id=kwargs.get("vehicle_id", uuid.uuid4()),
        invoice_date=kwargs.get("invoice_date", date(2024, 5, 1)),
        discount=Decimal(discount),
        notes=kwargs.get("notes"),
        lines=lines,
    )


def _validation_results(make_result, draft, catalog_items):
    """Risultati di db.execute per la validazione di una bozza valida."""
    return [
        make_result(scalar=draft.workshop_id),
        make_result(scalar=draft.vehicle_id),
        *[make_result(items=items) for items in catalog_items],
    ]


# ============================================================
# Bozza
# ============================================================


class TestAddItem:
    """Test aggiunta articoli alla bozza."""

    @pytest.mark.asyncio
    async def test_add_service(self, mock_db, make_result, ganti_oli):
        """Scenario A: servizio × 2 → una riga da 100.000."""
        mock_db.execute.side_effect = [make_result(scalar=ganti_oli)]

        response = await invoice_service.add_item(
            mock_db,
            AddItemRequest(item_kind=ItemKind.SERVICE, item_id=ganti_oli.id, quantity=2),
        )

        assert len(response.added) == 1
        assert response.added[0].subtotal == Decimal("100000")
        assert response.lines == response.added
        assert response.warnings == []

    @pytest.mark.asyncio
    async def test_add_package_appends_to_existing_lines(
        self, mock_db, make_result, ganti_oli, paket_a
    ):
        """Scenario B: pacchetto + ricambio incluso, accodati alla bozza."""
        existing = build_lines(ItemKind.SERVICE, ganti_oli, 1)
        mock_db.execute.side_effect = [
            make_result(scalar=paket_a),
            make_result(items=paket_a.bundle),
        ]

        response = await invoice_service.add_item(
            mock_db,
            AddItemRequest(
                item_kind=ItemKind.PACKAGE,
                item_id=paket_a.id,
                quantity="1",
                lines=existing,
            ),
        )

        assert [line.subtotal for line in response.added] == [Decimal("150000"), Decimal("30000")]
        assert len(response.lines) == 3
        assert response.lines[0].key == existing[0].key

    @pytest.mark.asyncio
    async def test_bundle_failure_keeps_package_line(self, mock_db, make_result, paket_a):
        """Test errore nel caricamento del bundle: pacchetto aggiunto con warning."""
        mock_db.execute.side_effect = [
            make_result(scalar=paket_a),
            OperationalError("SELECT", {}, Exception("connection lost")),
        ]

        response = await invoice_service.add_item(
            mock_db,
            AddItemRequest(item_kind=ItemKind.PACKAGE, item_id=paket_a.id, quantity=1),
        )

        assert len(response.added) == 1
        assert response.added[0].item_kind == ItemKind.PACKAGE
        assert len(response.warnings) == 1

    @pytest.mark.asyncio
    async def test_unknown_item(self, mock_db, make_result):
        """Test articolo inesistente → NotFoundError."""
        mock_db.execute.side_effect = [make_result(scalar=None)]

        with pytest.raises(NotFoundError):
            await invoice_service.add_item(
                mock_db,
                AddItemRequest(item_kind=ItemKind.SPAREPART, item_id=uuid.uuid4()),
            )


# ============================================================
# Creazione
# ============================================================


class TestCreateInvoice:
    """Test salvataggio testata + righe."""

    @pytest.mark.asyncio
    async def test_create_single_commit(self, mock_db, make_result, paket_a, filter_oli):
        """Scenario C: testata e righe con un solo commit, sconto salvato invariato."""
        lines = build_lines(ItemKind.PACKAGE, paket_a, 1, paket_a.bundle)
        draft = _draft(lines, discount="200000")
        mock_db.execute.side_effect = [
            *_validation_results(make_result, draft, [[paket_a], [filter_oli]]),
            make_result(scalar=0),
        ]

        invoice = await invoice_service.create(mock_db, draft)

        mock_db.add.assert_called_once_with(invoice)
        mock_db.commit.assert_awaited_once()
        mock_db.rollback.assert_not_awaited()

        assert invoice.discount == Decimal("200000")
        assert invoice.total_amount == Decimal("0")
        assert invoice.invoice_number.startswith("INV/20240501/")
        assert len(invoice.lines) == 2

        package_row, part_row = invoice.lines
        assert package_row.package_id == paket_a.id
        assert package_row.service_id is None and package_row.sparepart_id is None
        assert part_row.sparepart_id == filter_oli.id
        assert part_row.quantity == 1
        assert part_row.subtotal == Decimal("30000")
        assert [package_row.position, part_row.position] == [0, 1]

    @pytest.mark.asyncio
    async def test_total_recomputed_server_side(self, mock_db, make_result, ganti_oli):
        """Scenario A: totale calcolato dalle righe."""
        draft = _draft(build_lines(ItemKind.SERVICE, ganti_oli, 2))
        mock_db.execute.side_effect = [
            *_validation_results(make_result, draft, [[ganti_oli]]),
            make_result(scalar=0),
        ]

        invoice = await invoice_service.create(mock_db, draft)

        assert invoice.total_amount == Decimal("100000")

    @pytest.mark.asyncio
    async def test_integrity_error_rolls_back(self, mock_db, make_result, ganti_oli):
        """Test errore di integrità: rollback, nessun commit, ConflictError."""
        draft = _draft(build_lines(ItemKind.SERVICE, ganti_oli, 1))
        mock_db.execute.side_effect = [
            *_validation_results(make_result, draft, [[ganti_oli]]),
            make_result(scalar=0),
        ]
        mock_db.flush.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

        with pytest.raises(ConflictError):
            await invoice_service.create(mock_db, draft)

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_number_regenerated_on_collision(self, mock_db, make_result, ganti_oli):
        """Test numero già usato: nuovo suffisso."""
        draft = _draft(build_lines(ItemKind.SERVICE, ganti_oli, 1))
        mock_db.execute.side_effect = [
            *_validation_results(make_result, draft, [[ganti_oli]]),
            make_result(scalar=1),
            make_result(scalar=0),
        ]

        with patch(
            "bengkel.services.invoice_service.generate_invoice_number",
            side_effect=["INV/20240501/AAAA", "INV/20240501/BBBB"],
        ):
            invoice = await invoice_service.create(mock_db, draft)

        assert invoice.invoice_number == "INV/20240501/BBBB"

    @pytest.mark.asyncio
    async def test_number_attempts_exhausted(self, mock_db, make_result, ganti_oli):
        """Test nessun numero libero dopo i tentativi massimi → ConflictError."""
        draft = _draft(build_lines(ItemKind.SERVICE, ganti_oli, 1))
        mock_db.execute.side_effect = [
            *_validation_results(make_result, draft, [[ganti_oli]]),
            *[make_result(scalar=1) for _ in range(5)],
        ]

        with pytest.raises(ConflictError):
            await invoice_service.create(mock_db, draft)

        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requires_vehicle_and_workshop(self, mock_db, ganti_oli):
        """Test officina/veicolo non selezionati."""
        draft = _draft(build_lines(ItemKind.SERVICE, ganti_oli, 1), vehicle_id=None)

        with pytest.raises(BusinessValidationError):
            await invoice_service.create(mock_db, draft)

        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requires_lines(self, mock_db):
        """Test bozza senza righe."""
        with pytest.raises(BusinessValidationError):
            await invoice_service.create(mock_db, _draft([]))

    @pytest.mark.asyncio
    async def test_missing_vehicle(self, mock_db, make_result, ganti_oli):
        """Test veicolo inesistente → NotFoundError."""
        draft = _draft(build_lines(ItemKind.SERVICE, ganti_oli, 1))
        mock_db.execute.side_effect = [
            make_result(scalar=draft.workshop_id),
            make_result(scalar=None),
        ]

        with pytest.raises(NotFoundError):
            await invoice_service.create(mock_db, draft)

    @pytest.mark.asyncio
    async def test_missing_catalog_item(self, mock_db, make_result, ganti_oli):
        """Test articolo non più a catalogo → BusinessValidationError."""
        draft = _draft(build_lines(ItemKind.SERVICE, ganti_oli, 1))
        mock_db.execute.side_effect = _validation_results(make_result, draft, [[]])

        with pytest.raises(BusinessValidationError) as exc_info:
            await invoice_service.create(mock_db, draft)

        assert exc_info.value.extra == {"missing": [f"service {ganti_oli.id}"]}
        mock_db.add.assert_not_called()


# ============================================================
# Modifica
# ============================================================


def _saved_invoice(item, kind=ItemKind.SERVICE, quantity=1, subtotal="50000"):
    invoice = Invoice(
        id=uuid.uuid4(),
        invoice_number="INV/20240501/X1Y2",
        invoice_date=date(2024, 5, 1),
        discount=Decimal("0"),
        total_amount=Decimal(subtotal),
    )
    invoice.lines.append(
        InvoiceLine(
            id=uuid.uuid4(),
            **InvoiceLine.columns_for(kind, item.id),
            quantity=quantity,
            subtotal=Decimal(subtotal),
            position=0,
        )
    )
    return invoice


class TestReplaceInvoice:
    """Test sostituzione integrale di testata e righe."""

    @pytest.mark.asyncio
    async def test_replace_lines_single_commit(self, mock_db, make_result, ganti_oli, filter_oli):
        """Test righe sostituite e un solo commit."""
        invoice = _saved_invoice(ganti_oli)
        old_line = invoice.lines[0]

        lines = build_lines(ItemKind.SPAREPART, filter_oli, 3)
        draft = _draft(lines, discount="10000", notes="Servis rutin")
        mock_db.execute.side_effect = [
            make_result(scalar=invoice),
            *_validation_results(make_result, draft, [[filter_oli]]),
        ]

        result = await invoice_service.replace(mock_db, invoice.id, draft)

        assert result is invoice
        assert old_line not in invoice.lines
        assert len(invoice.lines) == 1
        assert invoice.lines[0].sparepart_id == filter_oli.id
        assert invoice.lines[0].quantity == 3
        assert invoice.discount == Decimal("10000")
        assert invoice.total_amount == Decimal("80000")
        assert invoice.notes == "Servis rutin"
        assert invoice.vehicle_id == draft.vehicle_id
        assert invoice.invoice_number == "INV/20240501/X1Y2"

        mock_db.commit.assert_awaited_once()
        mock_db.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_replace_keeps_submitted_subtotal(self, mock_db, make_result, ganti_oli):
        """Test il subtotale della riga ricaricata viene salvato invariato."""
        invoice = _saved_invoice(ganti_oli, quantity=2, subtotal="100000")
        line = DraftLine(
            item_kind=ItemKind.SERVICE,
            item_id=ganti_oli.id,
            name="Ganti Oli",
            unit_price=Decimal("60000"),
            quantity=2,
            subtotal=Decimal("100000"),
        )
        draft = _draft([line])
        mock_db.execute.side_effect = [
            make_result(scalar=invoice),
            *_validation_results(make_result, draft, [[ganti_oli]]),
        ]

        await invoice_service.replace(mock_db, invoice.id, draft)

        assert invoice.lines[0].subtotal == Decimal("100000")
        assert invoice.total_amount == Decimal("100000")

    @pytest.mark.asyncio
    async def test_replace_failure_rolls_back(self, mock_db, make_result, ganti_oli):
        """Test errore durante la sostituzione: rollback e nessun commit."""
        invoice = _saved_invoice(ganti_oli)
        draft = _draft(build_lines(ItemKind.SERVICE, ganti_oli, 1))
        mock_db.execute.side_effect = [
            make_result(scalar=invoice),
            *_validation_results(make_result, draft, [[ganti_oli]]),
        ]
        mock_db.flush.side_effect = [None, IntegrityError("INSERT", {}, Exception("fk"))]

        with pytest.raises(ConflictError):
            await invoice_service.replace(mock_db, invoice.id, draft)

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_replace_missing_invoice(self, mock_db, make_result, ganti_oli):
        mock_db.execute.side_effect = [make_result(scalar=None)]

        with pytest.raises(NotFoundError):
            await invoice_service.replace(
                mock_db, uuid.uuid4(), _draft(build_lines(ItemKind.SERVICE, ganti_oli, 1))
            )


# ============================================================
# Lettura
# ============================================================


class TestInvoiceDetail:
    """Test dettaglio per visualizzazione e stampa."""

    @pytest.mark.asyncio
    async def test_detail_with_owner_and_display_names(self, mock_db, make_result):
        owner_id = uuid.uuid4()
        service = Service(id=uuid.uuid4(), name="Ganti Oli", price=Decimal("50000"))
        invoice = _saved_invoice(service, quantity=2, subtotal="100000")
        invoice.lines[0].service = service
        invoice.vehicle = Vehicle(id=uuid.uuid4(), user_id=owner_id, plate_number="B 1234 XYZ")
        invoice.created_at = datetime(2024, 5, 1, 10, 0)
        profile = MockProfile(user_id=owner_id, name="Budi Santoso")

        mock_db.execute.side_effect = [
            make_result(scalar=invoice),
            make_result(scalar=profile),
        ]

        detail = await invoice_service.get_detail(mock_db, invoice.id)

        assert detail.owner.name == "Budi Santoso"
        assert detail.vehicle.plate_number == "B 1234 XYZ"
        assert detail.workshop is None
        assert detail.lines[0].display_name == "[Jasa] Ganti Oli"
        assert detail.subtotal == Decimal("100000")

    @pytest.mark.asyncio
    async def test_customer_cannot_see_other_invoices(self, mock_db, make_result, ganti_oli):
        """Test un cliente non vede le fatture di veicoli altrui."""
        invoice = _saved_invoice(ganti_oli)
        invoice.vehicle = Vehicle(id=uuid.uuid4(), user_id=uuid.uuid4(), plate_number="B 1 AB")
        mock_db.execute.side_effect = [make_result(scalar=invoice)]

        with pytest.raises(NotFoundError):
            await invoice_service.get_by_id(mock_db, invoice.id, MockUser(role="customer"))
