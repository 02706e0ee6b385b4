"""
Composizione righe e calcolo totali della bozza fattura
Progetto: Bengkel Manager (Gestionale Officina)

Funzioni pure, senza accesso al database: operano su oggetti di catalogo
già caricati (Service, Sparepart, Package con bundle) e sulle DraftLine.
"""

import logging
import math
import re
import secrets
import string
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, List, Optional, Sequence

from bengkel.core.config import settings
from bengkel.models.invoice import ItemKind
from bengkel.schemas.invoice import DraftLine, InvoiceTotals

logger = logging.getLogger(__name__)

# Alfabeto del suffisso casuale del numero fattura (base36 maiuscolo)
INVOICE_SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
INVOICE_SUFFIX_LENGTH = 4

UNKNOWN_ITEM_NAME = "Unknown"

# Etichette per la visualizzazione delle righe salvate
DISPLAY_PREFIXES = {
    ItemKind.PACKAGE: "[Paket]",
    ItemKind.SERVICE: "[Jasa]",
    ItemKind.SPAREPART: "[Part]",
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# -------------------------------------------------------------------
# Quantità
# -------------------------------------------------------------------

def coerce_quantity(value: Any) -> int:
    """
    Converte la quantità inserita in un intero ≥ 1.

    Valori non numerici, nulli, zero o negativi valgono 1. Le stringhe
    vengono lette fino al primo carattere non numerico ("3 pz" → 3),
    i decimali vengono troncati. Nessun limite superiore.
    """
    quantity: Optional[int] = None

    if isinstance(value, bool) or value is None:
        quantity = None
    elif isinstance(value, int):
        quantity = value
    elif isinstance(value, float):
        if math.isfinite(value):
            quantity = int(value)
    elif isinstance(value, Decimal):
        if value.is_finite():
            quantity = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            quantity = int(match.group(1))

    if quantity is None or quantity < 1:
        return 1
    return quantity


# -------------------------------------------------------------------
# Composizione righe
# -------------------------------------------------------------------

def build_lines(
    item_kind: ItemKind,
    item: Any,
    quantity: Any,
    bundle: Optional[Iterable[Any]] = None,
) -> List[DraftLine]:
    """
    Compone le righe di bozza per un articolo di catalogo.

    La prima riga è sempre l'articolo selezionato. Per un pacchetto segue
    una riga per ciascun ricambio incluso, con quantità
    (quantità bundle × quantità pacchetto) e riferimento al pacchetto.

    Args:
        item_kind: Tipo di articolo
        item: Service, Sparepart o Package (con id, name, price)
        quantity: Quantità inserita (normalizzata con coerce_quantity)
        bundle: Righe PackageSparepart del pacchetto (ignorato per gli altri tipi)

    Returns:
        Lista ordinata di DraftLine
    """
    item_kind = ItemKind(item_kind)
    qty = coerce_quantity(quantity)
    unit_price = Decimal(item.price)

    lines = [
        DraftLine(
            item_kind=item_kind,
            item_id=item.id,
            name=item.name,
            unit_price=unit_price,
            quantity=qty,
            subtotal=unit_price * qty,
        )
    ]

    if item_kind != ItemKind.PACKAGE or not bundle:
        return lines

    for entry in bundle:
        sparepart = entry.sparepart
        if sparepart is None:
            logger.warning(
                f"Ricambio {entry.sparepart_id} del pacchetto {item.id} non trovato"
            )
            continue

        bundled_qty = (entry.quantity or 1) * qty
        sparepart_price = Decimal(sparepart.price)
        lines.append(
            DraftLine(
                item_kind=ItemKind.SPAREPART,
                item_id=sparepart.id,
                name=f"{sparepart.name} (Paket: {item.name})",
                unit_price=sparepart_price,
                quantity=bundled_qty,
                subtotal=sparepart_price * bundled_qty,
                bundled_by=item.id,
            )
        )

    return lines


def remove_line(lines: Sequence[DraftLine], key: str) -> List[DraftLine]:
    """
    Rimuove una riga dalla bozza per chiave.

    Le righe aggiunte da un pacchetto restano: vanno rimosse una per una.
    """
    return [line for line in lines if line.key != key]


# -------------------------------------------------------------------
# Totali e formattazione
# -------------------------------------------------------------------

def format_currency(
    amount: Any,
    symbol: Optional[str] = None,
    separator: Optional[str] = None,
) -> str:
    """
    Formatta un importo in rupie: "Rp 1.250.000".

    Nessuna cifra decimale; l'arrotondamento (half-up) avviene solo
    per la visualizzazione.
    """
    symbol = settings.currency_symbol if symbol is None else symbol
    separator = settings.thousands_separator if separator is None else separator

    value = Decimal(amount if amount is not None else 0)
    rounded = int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    digits = f"{abs(rounded):,}".replace(",", separator)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol} {digits}"


def compute_subtotal(lines: Iterable[Any]) -> Decimal:
    """Somma dei subtotali delle righe."""
    return sum((Decimal(line.subtotal) for line in lines), Decimal("0"))


def compute_total(subtotal: Decimal, discount: Any) -> Decimal:
    """Totale = max(0, subtotale - sconto). Lo sconto non viene limitato."""
    total = Decimal(subtotal) - Decimal(discount or 0)
    return total if total > 0 else Decimal("0")


def compute_totals(lines: Iterable[Any], discount: Any = Decimal("0")) -> InvoiceTotals:
    """
    Calcola subtotale, sconto e totale della bozza.

    Args:
        lines: Righe (DraftLine o InvoiceLine)
        discount: Sconto in valuta

    Returns:
        InvoiceTotals con importi e stringhe formattate
    """
    discount = Decimal(discount or 0)
    subtotal = compute_subtotal(lines)
    total = compute_total(subtotal, discount)
    return InvoiceTotals(
        subtotal=subtotal,
        discount=discount,
        total=total,
        subtotal_display=format_currency(subtotal),
        discount_display=format_currency(discount),
        total_display=format_currency(total),
    )


# -------------------------------------------------------------------
# Numerazione
# -------------------------------------------------------------------

def generate_invoice_number(invoice_date: date, prefix: Optional[str] = None) -> str:
    """
    Genera un numero fattura nel formato PREFIX/YYYYMMDD/XXXX.

    Il suffisso è composto da 4 caratteri casuali [0-9A-Z]; l'unicità
    viene verificata da chi salva la fattura.
    """
    prefix = settings.invoice_number_prefix if prefix is None else prefix
    suffix = "".join(
        secrets.choice(INVOICE_SUFFIX_ALPHABET) for _ in range(INVOICE_SUFFIX_LENGTH)
    )
    return f"{prefix}/{invoice_date.strftime('%Y%m%d')}/{suffix}"


# -------------------------------------------------------------------
# Righe salvate
# -------------------------------------------------------------------

def line_item(line: Any) -> Optional[Any]:
    """Articolo di catalogo referenziato da una InvoiceLine (None se assente)."""
    ref = line.item_ref
    if ref is None:
        return None
    kind, _ = ref
    return getattr(line, kind.value, None)


def item_display_name(line: Any) -> str:
    """
    Nome visualizzato di una riga salvata.

    "[Paket] nome", "[Jasa] nome", "[Part] nome" oppure "Unknown Item"
    se l'articolo non esiste più.
    """
    ref = line.item_ref
    item = line_item(line)
    if ref is None or item is None:
        return f"{UNKNOWN_ITEM_NAME} Item"
    kind, _ = ref
    return f"{DISPLAY_PREFIXES[kind]} {item.name}"


def reconstruct_draft_lines(lines: Iterable[Any]) -> List[DraftLine]:
    """
    Ricostruisce le righe di bozza da una fattura salvata.

    Nome e prezzo unitario vengono dal catalogo corrente, il subtotale
    salvato è riportato invariato. Un articolo non più presente diventa
    "Unknown" con prezzo 0, così un nuovo salvataggio non perde la riga.
    """
    draft: List[DraftLine] = []
    for line in lines:
        ref = line.item_ref
        if ref is None:
            logger.warning(f"Riga fattura {line.id} senza articolo, ignorata")
            continue

        kind, item_id = ref
        item = line_item(line)
        draft.append(
            DraftLine(
                item_kind=kind,
                item_id=item_id,
                name=item.name if item is not None else UNKNOWN_ITEM_NAME,
                unit_price=Decimal(item.price) if item is not None else Decimal("0"),
                quantity=line.quantity,
                subtotal=Decimal(line.subtotal),
            )
        )
    return draft
