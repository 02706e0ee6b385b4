"""
Service Layer per la Fatturazione
Progetto: Bengkel Manager (Gestionale Officina)

Composizione della bozza (righe e totali), salvataggio testata + righe
in un'unica transazione, sostituzione integrale in modifica,
ricostruzione della bozza e dati per visualizzazione e stampa.
"""

import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.config import settings
from bengkel.core.exceptions import (
    BusinessValidationError,
    ConflictError,
    NotFoundError,
)
from bengkel.models import Invoice, InvoiceLine, ItemKind, Profile, User, Vehicle, Workshop
from bengkel.schemas.invoice import (
    AddItemRequest,
    AddItemResponse,
    DraftLine,
    InvoiceDetail,
    InvoiceDraft,
    InvoiceDraftLoaded,
    InvoiceLineRead,
    InvoiceSummary,
    InvoiceTotals,
    RemoveLineRequest,
    VehicleInfo,
    WorkshopInfo,
)
from bengkel.schemas.vehicle import OwnerProfile
from bengkel.services.catalog_service import (
    get_catalog_item,
    get_catalog_items,
    package_catalog,
)
from bengkel.services.invoice_builder import (
    build_lines,
    compute_subtotal,
    compute_totals,
    generate_invoice_number,
    item_display_name,
    reconstruct_draft_lines,
    remove_line,
)

logger = logging.getLogger(__name__)


class InvoiceService:
    """
    Service per la gestione delle fatture.

    Creazione e modifica scrivono testata e righe con un solo commit:
    in caso di errore viene eseguito il rollback di entrambe.
    """

    # ------------------------------------------------------------
    # Bozza
    # ------------------------------------------------------------

    async def add_item(
        self,
        db: AsyncSession,
        request: AddItemRequest,
    ) -> AddItemResponse:
        """
        Aggiunge un articolo alla bozza.

        Per un pacchetto vengono aggiunti anche i ricambi inclusi. Se la
        composizione non può essere letta la riga del pacchetto viene
        comunque aggiunta e l'errore è riportato tra i warnings.

        Raises:
            NotFoundError: Se l'articolo non esiste (la bozza non cambia)
        """
        item = await get_catalog_item(db, request.item_kind, request.item_id)

        bundle = None
        warnings: list[str] = []
        if request.item_kind == ItemKind.PACKAGE:
            try:
                bundle = await package_catalog.get_bundle(db, item.id)
            except SQLAlchemyError as e:
                logger.warning(f"Impossibile caricare i ricambi del pacchetto {item.id}: {e}")
                warnings.append(
                    f"Impossibile caricare i ricambi del pacchetto {item.name}: "
                    "aggiunto solo il pacchetto"
                )

        added = build_lines(request.item_kind, item, request.quantity, bundle)
        logger.debug(f"Aggiunte {len(added)} righe per {request.item_kind.value} {item.id}")

        return AddItemResponse(
            lines=[*request.lines, *added],
            added=added,
            warnings=warnings,
        )

    def remove_line(self, request: RemoveLineRequest) -> list[DraftLine]:
        return remove_line(request.lines, request.key)

    def totals(self, lines: list[DraftLine], discount) -> InvoiceTotals:
        return compute_totals(lines, discount)

    # ------------------------------------------------------------
    # Validazione e numerazione
    # ------------------------------------------------------------

    async def _validate_draft(self, db: AsyncSession, draft: InvoiceDraft) -> None:
        """
        Verifica la bozza prima del salvataggio.

        Raises:
            BusinessValidationError: Officina/veicolo non selezionati, nessuna
                riga o articoli inesistenti
            NotFoundError: Se officina o veicolo non esistono
        """
        if draft.workshop_id is None or draft.vehicle_id is None:
            raise BusinessValidationError("Selezionare officina e veicolo")

        if not draft.lines:
            raise BusinessValidationError("Aggiungere almeno un articolo")

        workshop = await db.execute(select(Workshop.id).where(Workshop.id == draft.workshop_id))
        if workshop.scalar_one_or_none() is None:
            logger.warning(f"Officina non trovata per fattura: {draft.workshop_id}")
            raise NotFoundError(f"Officina con ID {draft.workshop_id} non trovata")

        vehicle = await db.execute(select(Vehicle.id).where(Vehicle.id == draft.vehicle_id))
        if vehicle.scalar_one_or_none() is None:
            logger.warning(f"Veicolo non trovato per fattura: {draft.vehicle_id}")
            raise NotFoundError(f"Veicolo con ID {draft.vehicle_id} non trovato")

        # Riferimenti distinti, nell'ordine delle righe
        refs = list(dict.fromkeys((line.item_kind, line.item_id) for line in draft.lines))
        found = await get_catalog_items(db, refs)
        missing = [f"{kind.value} {item_id}" for kind, item_id in refs if (kind, item_id) not in found]
        if missing:
            raise BusinessValidationError(
                "Articoli non più presenti a catalogo",
                extra={"missing": missing},
            )

    async def _generate_unique_number(self, db: AsyncSession, invoice_date: date) -> str:
        """
        Genera un numero fattura non ancora usato.

        Raises:
            ConflictError: Se dopo il numero massimo di tentativi non si trova
                un numero libero
        """
        for attempt in range(1, settings.invoice_number_max_attempts + 1):
            number = generate_invoice_number(invoice_date)
            result = await db.execute(
                select(func.count())
                .select_from(Invoice)
                .where(Invoice.invoice_number == number)
            )
            if not result.scalar():
                return number
            logger.warning(f"Numero fattura {number} già in uso (tentativo {attempt})")

        raise ConflictError("Impossibile generare un numero fattura univoco, riprovare")

    @staticmethod
    def _build_rows(lines: list[DraftLine]) -> list[InvoiceLine]:
        """Traduce le righe di bozza nelle tre colonne FK della riga salvata."""
        return [
            InvoiceLine(
                **InvoiceLine.columns_for(line.item_kind, line.item_id),
                quantity=line.quantity,
                subtotal=line.subtotal,
                position=position,
            )
            for position, line in enumerate(lines)
        ]

    # ------------------------------------------------------------
    # Scrittura
    # ------------------------------------------------------------

    async def create(self, db: AsyncSession, draft: InvoiceDraft) -> Invoice:
        """
        Crea una fattura con tutte le sue righe in un'unica transazione.

        Il totale viene ricalcolato dalle righe e dallo sconto.

        Args:
            db: Sessione database
            draft: Bozza completa

        Returns:
            La fattura creata

        Raises:
            BusinessValidationError, NotFoundError: Bozza non valida
            ConflictError: Numero fattura non disponibile o errore di integrità
        """
        await self._validate_draft(db, draft)

        invoice_number = await self._generate_unique_number(db, draft.invoice_date)
        totals = compute_totals(draft.lines, draft.discount)

        invoice = Invoice(
            invoice_number=invoice_number,
            invoice_date=draft.invoice_date,
            vehicle_id=draft.vehicle_id,
            workshop_id=draft.workshop_id,
            notes=draft.notes,
            discount=draft.discount,
            total_amount=totals.total,
        )
        for row in self._build_rows(draft.lines):
            invoice.lines.append(row)

        db.add(invoice)

        try:
            await db.flush()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.error(f"Errore di integrità durante creazione fattura: {e}")
            raise ConflictError("Errore durante la creazione della fattura")

        logger.info(
            f"Creata fattura {invoice.invoice_number} ({len(draft.lines)} righe, "
            f"totale {totals.total})"
        )
        return invoice

    async def replace(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
        draft: InvoiceDraft,
    ) -> Invoice:
        """
        Sostituisce testata e righe di una fattura in un'unica transazione.

        Le righe esistenti vengono eliminate e quelle della bozza inserite
        come nuove (gli id delle righe non sono stabili). Il numero
        fattura non cambia.

        Raises:
            NotFoundError: Se la fattura non esiste
            BusinessValidationError: Bozza non valida
            ConflictError: Errore di integrità, nessuna modifica applicata
        """
        invoice = await self._get(db, invoice_id)
        await self._validate_draft(db, draft)

        totals = compute_totals(draft.lines, draft.discount)

        try:
            invoice.invoice_date = draft.invoice_date
            invoice.vehicle_id = draft.vehicle_id
            invoice.workshop_id = draft.workshop_id
            invoice.notes = draft.notes
            invoice.discount = draft.discount
            invoice.total_amount = totals.total

            invoice.lines.clear()
            await db.flush()

            for row in self._build_rows(draft.lines):
                invoice.lines.append(row)

            await db.flush()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.error(f"Errore di integrità durante modifica fattura {invoice_id}: {e}")
            raise ConflictError("Errore durante la modifica della fattura")

        logger.info(
            f"Modificata fattura {invoice.invoice_number} ({len(draft.lines)} righe, "
            f"totale {totals.total})"
        )
        return invoice

    async def delete(self, db: AsyncSession, invoice_id: uuid.UUID) -> None:
        """Elimina una fattura con le sue righe."""
        invoice = await self._get(db, invoice_id)
        await db.delete(invoice)
        await db.commit()

        logger.info(f"Eliminata fattura {invoice.invoice_number}")

    # ------------------------------------------------------------
    # Lettura
    # ------------------------------------------------------------

    async def _get(self, db: AsyncSession, invoice_id: uuid.UUID) -> Invoice:
        result = await db.execute(
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .execution_options(populate_existing=True)
        )
        invoice = result.scalar_one_or_none()

        if invoice is None:
            logger.warning(f"Fattura non trovata: {invoice_id}")
            raise NotFoundError(f"Fattura con ID {invoice_id} non trovata")

        return invoice

    async def get_by_id(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
        current_user: Optional[User] = None,
    ) -> Invoice:
        """
        Recupera una fattura visibile all'utente.

        Un cliente vede solo le fatture dei propri veicoli; per le altre
        riceve NotFoundError.
        """
        invoice = await self._get(db, invoice_id)

        if current_user is not None and not current_user.is_staff_or_owner:
            if invoice.vehicle is None or invoice.vehicle.user_id != current_user.id:
                logger.warning(f"Fattura {invoice_id} non visibile a {current_user.id}")
                raise NotFoundError(f"Fattura con ID {invoice_id} non trovata")

        return invoice

    @staticmethod
    def summarize(invoice: Invoice) -> InvoiceSummary:
        return InvoiceSummary(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            invoice_date=invoice.invoice_date,
            vehicle=VehicleInfo.model_validate(invoice.vehicle) if invoice.vehicle else None,
            workshop=WorkshopInfo.model_validate(invoice.workshop) if invoice.workshop else None,
            discount=invoice.discount,
            total_amount=invoice.total_amount,
            created_at=invoice.created_at,
        )

    async def get_all(
        self,
        db: AsyncSession,
        current_user: User,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> tuple[list[InvoiceSummary], int]:
        """
        Elenco fatture visibili all'utente, più recenti prima.

        Args:
            db: Sessione database
            current_user: Utente che effettua la richiesta
            search: Filtro sul numero fattura o sulla targa
            limit: Numero massimo di fatture restituite

        Returns:
            Tuple di (lista fatture, totale count)
        """
        filter_conditions = []
        if not current_user.is_staff_or_owner:
            filter_conditions.append(Vehicle.user_id == current_user.id)
        if search:
            search_term = f"%{search}%"
            filter_conditions.append(
                Invoice.invoice_number.ilike(search_term)
                | Vehicle.plate_number.ilike(search_term)
            )

        query = (
            select(Invoice)
            .outerjoin(Vehicle, Invoice.vehicle_id == Vehicle.id)
            .where(*filter_conditions)
            .order_by(Invoice.created_at.desc())
        )
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        invoices = list(result.scalars().all())

        count_query = (
            select(func.count(Invoice.id))
            .select_from(Invoice)
            .outerjoin(Vehicle, Invoice.vehicle_id == Vehicle.id)
            .where(*filter_conditions)
        )
        count_result = await db.execute(count_query)
        total = count_result.scalar() or 0

        return [self.summarize(invoice) for invoice in invoices], total

    async def get_draft(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
    ) -> InvoiceDraftLoaded:
        """
        Ricostruisce la bozza di una fattura salvata per la modifica.

        Nome e prezzo unitario dal catalogo corrente, subtotale invariato.
        """
        invoice = await self._get(db, invoice_id)
        return InvoiceDraftLoaded(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            workshop_id=invoice.workshop_id,
            vehicle_id=invoice.vehicle_id,
            invoice_date=invoice.invoice_date,
            discount=invoice.discount,
            notes=invoice.notes,
            lines=reconstruct_draft_lines(invoice.lines),
        )

    async def _get_owner(self, db: AsyncSession, vehicle: Optional[Vehicle]) -> Optional[Profile]:
        if vehicle is None or vehicle.user_id is None:
            return None
        result = await db.execute(select(Profile).where(Profile.user_id == vehicle.user_id))
        return result.scalar_one_or_none()

    async def get_detail(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
        current_user: Optional[User] = None,
    ) -> InvoiceDetail:
        """
        Dettaglio fattura per visualizzazione e stampa.

        Il profilo del proprietario del veicolo viene letto a parte;
        riferimenti mancanti diventano None o "Unknown Item".
        """
        invoice = await self.get_by_id(db, invoice_id, current_user)
        owner = await self._get_owner(db, invoice.vehicle)

        lines = []
        for line in invoice.lines:
            ref = line.item_ref
            lines.append(
                InvoiceLineRead(
                    id=line.id,
                    item_kind=ref[0] if ref else None,
                    item_id=ref[1] if ref else None,
                    display_name=item_display_name(line),
                    quantity=line.quantity,
                    subtotal=line.subtotal,
                )
            )

        summary = self.summarize(invoice)
        return InvoiceDetail(
            **summary.model_dump(),
            notes=invoice.notes,
            owner=OwnerProfile.model_validate(owner) if owner else None,
            lines=lines,
            subtotal=compute_subtotal(invoice.lines),
        )


invoice_service = InvoiceService()
