"""
Service per la stampa fatture con Jinja2 (HTML) e WeasyPrint (PDF).
Progetto: Bengkel Manager (Gestionale Officina)
"""

import logging
import os
from datetime import date

from jinja2 import Environment, FileSystemLoader, select_autoescape

from bengkel.core.config import settings
from bengkel.schemas.invoice import InvoiceDetail
from bengkel.services.invoice_builder import format_currency

logger = logging.getLogger(__name__)

# Path alla cartella templates
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
TEMPLATES_DIR = os.path.join(BASE_DIR, "templates")


# WeasyPrint richiede Pango a livello di sistema: import solo al primo PDF
def _get_weasyprint():
    """Importa weasyprint.HTML, RuntimeError se mancano le librerie di sistema."""
    try:
        from weasyprint import HTML
        return HTML
    except OSError as e:
        raise RuntimeError(
            "Librerie di sistema per WeasyPrint non trovate: installare Pango "
            "(es. apt install libpango-1.0-0 libpangoft2-1.0-0)"
        ) from e


class PdfService:
    """
    Rende la fattura in HTML stampabile e in PDF.

    Entrambi i formati usano lo stesso InvoiceDetail: la stampa non
    richiede dati aggiuntivi rispetto alla visualizzazione.
    """

    def __init__(self):
        self.env = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            autoescape=select_autoescape(["html"]),
        )
        self.env.filters["rupiah"] = format_currency

    def _stylesheet(self) -> str:
        with open(os.path.join(TEMPLATES_DIR, "invoice_style.css"), encoding="utf-8") as f:
            return f.read()

    def render_invoice_html(self, invoice: InvoiceDetail) -> str:
        """
        Genera l'HTML di stampa di una fattura.

        Args:
            invoice: Dettaglio fattura (righe con nomi già risolti)

        Returns:
            Documento HTML completo, con stile incorporato
        """
        template = self.env.get_template("invoice_template.html")
        context = {
            # Dati officina per l'intestazione (da settings)
            "company_name": settings.invoice_company_name,
            "company_address": settings.invoice_address,
            "company_phone": settings.invoice_phone,
            "company_email": settings.invoice_email,

            "invoice": invoice,
            "workshop": invoice.workshop,
            "vehicle": invoice.vehicle,
            "owner": invoice.owner,
            "printed_on": date.today().strftime("%d/%m/%Y"),
            "stylesheet": self._stylesheet(),
        }
        return template.render(context)

    def generate_invoice_pdf(self, invoice: InvoiceDetail) -> bytes:
        """
        Genera il PDF di una fattura.

        Returns:
            bytes: PDF binario pronto per il download
        """
        HTML = _get_weasyprint()

        html_out = self.render_invoice_html(invoice)
        pdf_bytes = HTML(string=html_out, base_url=TEMPLATES_DIR).write_pdf()

        logger.info(f"Generato PDF fattura {invoice.invoice_number}")
        return pdf_bytes


pdf_service = PdfService()
