"""
Router FastAPI per la Fatturazione
Progetto: Bengkel Manager (Gestionale Officina)

Definisce gli endpoint per:
- Composizione bozza (aggiunta/rimozione righe, totali)
- CRUD fatture (testata + righe in un'unica transazione)
- Stampa HTML e PDF
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.database import get_db
from bengkel.core.deps import CurrentUser, StaffUser
from bengkel.schemas.invoice import (
    AddItemRequest,
    AddItemResponse,
    DraftLine,
    InvoiceDetail,
    InvoiceDraft,
    InvoiceDraftLoaded,
    InvoiceList,
    InvoiceTotals,
    RemoveLineRequest,
    TotalsRequest,
)
from bengkel.services.invoice_service import invoice_service
from bengkel.services.pdf_service import pdf_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/invoices",
    tags=["Fatture"],
)


# -------------------------------------------------------------------
# Bozza
# -------------------------------------------------------------------

# Le route /draft/... sono definite prima di /{invoice_id}

@router.post(
    "/draft/lines",
    name="bozza_aggiungi_articolo",
    summary="Aggiunge un articolo alla bozza",
    description=(
        "Compone le righe per un servizio, ricambio o pacchetto. Un pacchetto "
        "aggiunge anche i ricambi inclusi (quantità moltiplicata)."
    ),
    response_model=AddItemResponse,
)
async def add_draft_item(
    request: AddItemRequest,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> AddItemResponse:
    return await invoice_service.add_item(db, request)


@router.post(
    "/draft/lines/remove",
    name="bozza_rimuovi_riga",
    summary="Rimuove una riga dalla bozza",
    description="Le righe dei ricambi aggiunte da un pacchetto non vengono rimosse.",
    response_model=list[DraftLine],
)
async def remove_draft_line(
    request: RemoveLineRequest,
    current_user: StaffUser,
) -> list[DraftLine]:
    return invoice_service.remove_line(request)


@router.post(
    "/draft/totals",
    name="bozza_totali",
    summary="Totali della bozza",
    response_model=InvoiceTotals,
)
async def draft_totals(
    request: TotalsRequest,
    current_user: StaffUser,
) -> InvoiceTotals:
    return invoice_service.totals(request.lines, request.discount)


# -------------------------------------------------------------------
# CRUD
# -------------------------------------------------------------------

@router.get(
    "/",
    name="fatture_lista",
    summary="Lista fatture",
    description="Fatture più recenti prima; un cliente vede solo quelle dei propri veicoli.",
    response_model=InvoiceList,
)
async def get_invoices(
    current_user: CurrentUser,
    search: Optional[str] = Query(None, description="Filtro su numero fattura o targa"),
    db: AsyncSession = Depends(get_db),
) -> InvoiceList:
    items, total = await invoice_service.get_all(db, current_user, search=search)
    return InvoiceList(items=items, total=total)


@router.post(
    "/",
    name="fattura_crea",
    summary="Crea fattura",
    response_model=InvoiceDetail,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    draft: InvoiceDraft,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> InvoiceDetail:
    """
    Salva la bozza come nuova fattura.

    Raises:
        404: Officina o veicolo inesistenti
        409: Numero fattura non disponibile
        422: Bozza incompleta o articoli non più a catalogo
    """
    invoice = await invoice_service.create(db, draft)
    return await invoice_service.get_detail(db, invoice.id)


@router.get(
    "/{invoice_id}",
    name="fattura_dettaglio",
    summary="Dettaglio fattura",
    response_model=InvoiceDetail,
)
async def get_invoice(
    invoice_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> InvoiceDetail:
    return await invoice_service.get_detail(db, invoice_id, current_user)


@router.get(
    "/{invoice_id}/draft",
    name="fattura_bozza",
    summary="Bozza per la modifica",
    description="Righe con nome e prezzo dal catalogo corrente e subtotale salvato.",
    response_model=InvoiceDraftLoaded,
)
async def get_invoice_draft(
    invoice_id: uuid.UUID,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> InvoiceDraftLoaded:
    return await invoice_service.get_draft(db, invoice_id)


@router.put(
    "/{invoice_id}",
    name="fattura_aggiorna",
    summary="Sostituisce la fattura",
    description="Aggiorna la testata e sostituisce tutte le righe in un'unica transazione.",
    response_model=InvoiceDetail,
)
async def replace_invoice(
    invoice_id: uuid.UUID,
    draft: InvoiceDraft,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> InvoiceDetail:
    invoice = await invoice_service.replace(db, invoice_id, draft)
    return await invoice_service.get_detail(db, invoice.id)


@router.delete(
    "/{invoice_id}",
    name="fattura_elimina",
    summary="Elimina fattura",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_invoice(
    invoice_id: uuid.UUID,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await invoice_service.delete(db, invoice_id)


# -------------------------------------------------------------------
# Stampa
# -------------------------------------------------------------------

@router.get(
    "/{invoice_id}/print",
    name="fattura_stampa",
    summary="Stampa fattura (HTML)",
    response_class=HTMLResponse,
)
async def print_invoice(
    invoice_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> HTMLResponse:
    invoice = await invoice_service.get_detail(db, invoice_id, current_user)
    return HTMLResponse(content=pdf_service.render_invoice_html(invoice))


@router.get(
    "/{invoice_id}/pdf",
    name="fattura_pdf",
    summary="Scarica PDF fattura",
    response_class=Response,
)
async def download_invoice_pdf(
    invoice_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> Response:
    invoice = await invoice_service.get_detail(db, invoice_id, current_user)

    try:
        pdf_bytes = pdf_service.generate_invoice_pdf(invoice)
    except RuntimeError as e:
        logger.error(f"Generazione PDF non disponibile: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Generazione PDF non disponibile sul server",
        )

    filename = invoice.invoice_number.replace("/", "-")
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"'},
    )
