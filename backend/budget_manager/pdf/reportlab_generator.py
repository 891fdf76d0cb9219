import logging
import os
import io
from typing import List, Optional, Sequence, TypeVar
from xml.sax.saxutils import escape

from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Image, Table, TableStyle, PageBreak
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.pagesizes import A4
from reportlab.lib import colors

from budget_manager.pdf.config import PDFSettings
from budget_manager.pdf.generator import AbstractPDFGenerator
from budget_manager.pdf.exceptions import PDFGenerationException
from budget_manager.pdf.models import PDFBudgetData, PDFBudgetLine

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunk_rows(rows: Sequence[T], rows_per_page: int) -> List[List[T]]:
    """Découpe les lignes en pages de rows_per_page lignes (au moins une page, même vide)."""
    if rows_per_page < 1:
        raise ValueError("rows_per_page doit être >= 1")
    if not rows:
        return [[]]
    return [list(rows[i:i + rows_per_page]) for i in range(0, len(rows), rows_per_page)]


def _fmt_money(value) -> str:
    return f"{value:.2f}"


def _fmt_number(value) -> str:
    return f"{value.normalize():f}"


def _fmt_date(value) -> str:
    return value.strftime('%d/%m/%Y') if value else "-"


class ReportLabPDFGenerator(AbstractPDFGenerator):
    """Implémentation du générateur PDF utilisant ReportLab."""

    def __init__(self, settings: PDFSettings):
        self.settings = settings
        # Convertir la couleur HEX en objet couleur ReportLab une seule fois
        self.primary_color = colors.HexColor(settings.PRIMARY_COLOR_HEX)
        styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(name="BudgetTitle", parent=styles["Heading1"], textColor=self.primary_color, alignment=1)
        self.heading_style = styles["Heading3"]
        self.normal_style = styles["Normal"]
        self.cell_style = ParagraphStyle(name="Cell", parent=self.normal_style, fontSize=8, leading=10)
        self.bold_style = ParagraphStyle(name="Bold", parent=self.normal_style, fontName='Helvetica-Bold')
        self.footer_style = ParagraphStyle(name="Footer", fontSize=8, textColor=colors.gray, alignment=1)
        logger.info("[ReportLabPDFGenerator] Initialisé avec la configuration.")

    async def generate_budget_pdf(
        self,
        budget_data: PDFBudgetData,
        output_path: Optional[str] = None
    ) -> bytes:
        """Génère le PDF d'un budget avec ReportLab.

        Contenu : en-tête, informations client et références, tableaux des
        matières et des extras (paginés par ROWS_PER_PAGE lignes), total,
        options de prix et dates du projet.
        """
        budget_id = budget_data.id
        logger.info(f"[PDFGen] Génération PDF budget #{budget_id}")

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4, title=f"Budget {budget_id}")
        elements = []

        elements.extend(self._header(budget_data))
        elements.extend(self._line_tables("Matières", budget_data.materials))
        elements.append(Spacer(1, 0.1 * inch))
        elements.append(Paragraph(f"<b>Total matières (€) : {_fmt_money(budget_data.total_amount)}</b>", self.bold_style))
        elements.append(Spacer(1, 0.2 * inch))
        if budget_data.extras:
            elements.extend(self._line_tables("Extras", budget_data.extras))
            elements.append(Spacer(1, 0.2 * inch))
        elements.extend(self._pricing_table(budget_data))
        elements.extend(self._schedule(budget_data))

        def add_footer(canvas, doc):
            canvas.saveState()
            footer = Paragraph(f"{self.settings.FOOTER_TEXT} - page {doc.page}", self.footer_style)
            w, h = footer.wrap(doc.width, doc.bottomMargin)
            footer.drawOn(canvas, doc.leftMargin, h)
            canvas.restoreState()

        try:
            doc.build(elements, onFirstPage=add_footer, onLaterPages=add_footer)
            pdf_bytes = buffer.getvalue()
            buffer.close()
            logger.info(f"[PDFGen] PDF budget #{budget_id} généré en mémoire ({len(pdf_bytes)} bytes).")
        except Exception as e:
            logger.error(f"[PDFGen] Erreur ReportLab build() pour budget #{budget_id}: {e}", exc_info=True)
            raise PDFGenerationException(f"Erreur lors de la construction du PDF: {e}", original_exception=e)

        if output_path:
            self._save(pdf_bytes, output_path, budget_id)
        return pdf_bytes

    # --- Sections ---

    def _header(self, data: PDFBudgetData) -> list:
        elements = []
        if os.path.exists(self.settings.LOGO_PATH):
            logo = Image(self.settings.LOGO_PATH, width=1.5 * inch, height=0.75 * inch)
            logo.hAlign = 'LEFT'
            elements.append(logo)
        else:
            logger.debug(f"[PDFGen] Logo non trouvé : {self.settings.LOGO_PATH}")
            elements.append(Paragraph(self.settings.COMPANY_NAME, self.normal_style))

        elements.append(Paragraph(f"Budget #{data.id}", self.title_style))
        elements.append(Spacer(1, 0.2 * inch))

        client_text = f"<b>Client :</b> {escape(data.client.name)}"
        if data.client.email:
            client_text += f" ({escape(data.client.email)})"
        elements.append(Paragraph(client_text, self.normal_style))
        if data.client.brand:
            elements.append(Paragraph(f"<b>Marque :</b> {escape(data.client.brand)}", self.normal_style))

        details = [
            ("Date", _fmt_date(data.created_at)),
            ("Statut", data.status_label),
            ("Réf. interne", data.internal_ref or "-"),
            ("Réf. client", data.client_ref or "-"),
            ("Collection", data.collection or "-"),
            ("Taille", data.size or "-"),
        ]
        for label, value in details:
            elements.append(Paragraph(f"<b>{label} :</b> {escape(value)}", self.normal_style))
        elements.append(Spacer(1, 0.3 * inch))
        return elements

    def _line_tables(self, title: str, lines: List[PDFBudgetLine]) -> list:
        """Un tableau par page : saut de page après ROWS_PER_PAGE lignes."""
        elements = [Paragraph(title, self.heading_style)]
        header = ["Description", "Fournisseur", "Qté", "Unité", "P.U. (€)", "Coût (€)", "MOQ", "Délai (j)"]
        rows = [
            [
                Paragraph(escape(line.description), self.cell_style),
                Paragraph(escape(line.supplier), self.cell_style),
                _fmt_number(line.quantity),
                line.unit_label,
                _fmt_money(line.unit_price),
                _fmt_money(line.line_cost),
                str(line.moq_quantity) if line.moq_quantity is not None else "-",
                str(line.lead_time_days) if line.lead_time_days is not None else "-",
            ]
            for line in lines
        ]
        pages = chunk_rows(rows, self.settings.ROWS_PER_PAGE)
        for index, page_rows in enumerate(pages):
            if index > 0:
                elements.append(PageBreak())
                elements.append(Paragraph(f"{title} (suite)", self.heading_style))
            table = Table(
                [header] + page_rows,
                colWidths=[2.0 * inch, 1.1 * inch, 0.5 * inch, 0.6 * inch, 0.7 * inch, 0.8 * inch, 0.5 * inch, 0.6 * inch],
                repeatRows=1,
            )
            table.setStyle(self._table_style())
            elements.append(table)
        return elements

    def _pricing_table(self, data: PDFBudgetData) -> list:
        elements = [Paragraph("Options de prix", self.heading_style)]
        table_data = [["Option", "Quantité", "Marge (%)", "Marge (€)", "Coût total (€)", "Prix client (€)"]]
        for option in data.pricing_options:
            table_data.append([
                str(option.id),
                _fmt_number(option.quantity),
                _fmt_number(option.margin_percentage),
                _fmt_money(option.margin_amount),
                _fmt_money(option.total_cost),
                _fmt_money(option.client_price),
            ])
        table = Table(table_data, repeatRows=1)
        table.setStyle(self._table_style())
        elements.append(table)
        elements.append(Spacer(1, 0.3 * inch))
        return elements

    def _schedule(self, data: PDFBudgetData) -> list:
        return [
            Paragraph("Planning", self.heading_style),
            Paragraph(f"<b>Début du projet :</b> {_fmt_date(data.project_start_date)}", self.normal_style),
            Paragraph(f"<b>Délai total :</b> {data.total_lead_days} jours ouvrés", self.normal_style),
            Paragraph(f"<b>Fin estimée :</b> {_fmt_date(data.estimated_end_date)}", self.normal_style),
        ]

    def _table_style(self) -> TableStyle:
        return TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), self.primary_color),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('ALIGN', (2, 1), (-1, -1), 'RIGHT'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.darkgrey),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 6),
        ])

    def _save(self, pdf_bytes: bytes, output_path: str, budget_id: int) -> None:
        try:
            output_dir = os.path.dirname(output_path)
            if not output_dir:  # Aucun dossier spécifié : dossier tmp par défaut
                output_dir = self.settings.TMP_PDF_DIR
                output_path = os.path.join(output_dir, os.path.basename(output_path))
            os.makedirs(output_dir, exist_ok=True)
            with open(output_path, "wb") as f:
                f.write(pdf_bytes)
            logger.info(f"[PDFGen] PDF budget #{budget_id} sauvegardé dans: {output_path}")
        except OSError as save_err:
            logger.error(f"[PDFGen] Erreur sauvegarde PDF dans {output_path}: {save_err}", exc_info=True)
