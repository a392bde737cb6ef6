"""
Billing documents: invoice PDF (Pillow), pro-forma DOCX (python-docx) and
the clients-by-container listing as DOCX or XLSX (openpyxl).
"""
import io
import json
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from django.conf import settings
from django.utils import timezone
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

from logistics.core import pdf

logger = logging.getLogger(__name__)

COMMISSION_RATE = Decimal('0.10')
VAT_RATE = Decimal('0.20')
CENT = Decimal('0.01')

DOCX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

CLIENT_COLUMNS = ['Nom', 'Email', 'Téléphone', 'Société', 'Conteneur']


@dataclass
class InvoiceAmounts:
    base: Decimal
    commission: Decimal
    subtotal: Decimal
    vat: Decimal
    total: Decimal


@dataclass
class ProformaItem:
    description: str
    quantity: Decimal
    unit_price: Decimal

    @property
    def total(self):
        return (self.quantity * self.unit_price).quantize(CENT, rounding=ROUND_HALF_UP)


def company_info():
    return {
        'name': settings.COMPANY_NAME,
        'address': settings.COMPANY_ADDRESS,
        'phone': settings.COMPANY_PHONE,
        'email': settings.COMPANY_EMAIL,
        'vat': settings.COMPANY_VAT,
        'iban': settings.COMPANY_IBAN,
        'bic': settings.COMPANY_BIC,
    }


def format_eur(amount, currency='EUR'):
    """1234.5 -> '1 234,50 €' (French formatting)"""
    value = Decimal(amount or 0).quantize(CENT, rounding=ROUND_HALF_UP)
    integer, _, fraction = f"{abs(value):.2f}".partition('.')
    groups = []
    while integer:
        groups.insert(0, integer[-3:])
        integer = integer[:-3]
    sign = '-' if value < 0 else ''
    symbol = '€' if currency == 'EUR' else currency
    return f"{sign}{' '.join(groups)},{fraction} {symbol}"


def compute_invoice_amounts(base_amount) -> InvoiceAmounts:
    """Commission and VAT are both taken on the base amount."""
    base = Decimal(base_amount or 0).quantize(CENT, rounding=ROUND_HALF_UP)
    commission = (base * COMMISSION_RATE).quantize(CENT, rounding=ROUND_HALF_UP)
    vat = (base * VAT_RATE).quantize(CENT, rounding=ROUND_HALF_UP)
    subtotal = base - commission
    return InvoiceAmounts(base=base, commission=commission, subtotal=subtotal, vat=vat, total=subtotal + vat)


def invoice_qr_payload(order, amounts: InvoiceAmounts):
    return {
        'order_number': order.order_number,
        'client': order.client_name,
        'service': order.service_type,
        'route': f"{order.origin} → {order.destination}",
        'value': float(order.value) if order.value is not None else None,
        'status': order.status,
        'created': order.created_at.isoformat() if order.created_at else None,
        'total': float(amounts.total),
        'invoice_date': timezone.now().isoformat(),
    }


def build_invoice_pdf(order, company=None) -> bytes:
    company = company or company_info()
    amounts = compute_invoice_amounts(order.value)

    page, draw = pdf.new_page()
    title_font = pdf.load_font(40, bold=True)
    h_font = pdf.load_font(20, bold=True)
    label_font = pdf.load_font(16, bold=True)
    body_font = pdf.load_font(15)
    small_font = pdf.load_font(12)

    # Header band
    draw.rectangle([0, 0, pdf.PAGE_WIDTH, 160], fill=pdf.BRAND_ORANGE)
    draw.text((pdf.MARGIN, 30), 'DANEMO', fill='white', font=title_font)
    header_lines = [
        company['name'],
        company['address'],
        f"Tél: {company['phone']} | Email: {company['email']}",
        f"TVA: {company['vat']} | IBAN: {company['iban']} | BIC: {company['bic']}",
    ]
    y = 82
    for line in header_lines:
        draw.text((pdf.MARGIN, y), line, fill='white', font=small_font)
        y += 17

    right_x = pdf.PAGE_WIDTH - 260
    draw.text((right_x, 30), 'FACTURE', fill='white', font=h_font)
    draw.text((right_x, 70), f"N° {order.order_number}", fill='white', font=body_font)
    created = timezone.localtime(order.created_at) if order.created_at else timezone.now()
    draw.text((right_x, 92), f"Date: {created:%d/%m/%Y}", fill='white', font=body_font)
    draw.text((right_x, 114), f"Statut: {order.status}", fill='white', font=body_font)

    # Customer block
    y = 200
    draw.text((pdf.MARGIN, y), 'FACTURÉ À:', fill=pdf.TEXT_DARK, font=label_font)
    y += 30
    for line in (order.client_name, order.client_email, order.client_phone):
        if line:
            draw.text((pdf.MARGIN, y), str(line), fill=pdf.TEXT_DARK, font=body_font)
            y += 22

    # Order details
    y += 25
    draw.text((pdf.MARGIN, y), 'DÉTAILS DE LA COMMANDE:', fill=pdf.TEXT_DARK, font=label_font)
    y += 35
    details = [
        ('Service', order.service_type or 'N/A'),
        ('Origine', order.origin or 'N/A'),
        ('Destination', order.destination or 'N/A'),
        ('Poids', f"{order.weight} kg" if order.weight else 'N/A'),
        ('Valeur déclarée', format_eur(order.value) if order.value else 'N/A'),
    ]
    y = pdf.draw_table(draw, pdf.MARGIN, y, ['Libellé', 'Valeur'], details, [240, 467], body_font, label_font)

    # Financial breakdown
    y += 35
    draw.text((pdf.MARGIN, y), 'CALCULS FINANCIERS:', fill=pdf.TEXT_DARK, font=label_font)
    y += 35
    calculations = [
        ('Montant de base', format_eur(amounts.base)),
        ('Commission (10%)', f"-{format_eur(amounts.commission)}"),
        ('Sous-total', format_eur(amounts.subtotal)),
        ('TVA (20%)', format_eur(amounts.vat)),
        ('TOTAL', format_eur(amounts.total)),
    ]
    y = pdf.draw_table(draw, pdf.MARGIN, y, ['Poste', 'Montant'], calculations, [240, 467], body_font, label_font)

    # QR code with the order summary
    y += 35
    draw.text((pdf.MARGIN, y), 'QR CODE - INFORMATIONS COMMANDE:', fill=pdf.TEXT_DARK, font=label_font)
    y += 30
    qr_image = pdf.make_qr_image(json.dumps(invoice_qr_payload(order, amounts), ensure_ascii=False), box_size=3)
    pdf.paste_fitted(page, qr_image, pdf.MARGIN, y, 160, 160)
    draw.text((pdf.MARGIN + 180, y + 50), 'Scanner pour vérifier', fill=pdf.TEXT_MUTED, font=small_font)
    draw.text((pdf.MARGIN + 180, y + 68), 'les détails de la commande', fill=pdf.TEXT_MUTED, font=small_font)

    # Footer
    footer_y = pdf.PAGE_HEIGHT - 60
    draw.line([pdf.MARGIN, footer_y - 12, pdf.PAGE_WIDTH - pdf.MARGIN, footer_y - 12], fill=pdf.RULE_GREY, width=1)
    draw.text((pdf.MARGIN, footer_y), 'Merci pour votre confiance - Danemo', fill=pdf.TEXT_MUTED, font=small_font)
    draw.text((pdf.PAGE_WIDTH - pdf.MARGIN - 70, footer_y), 'Page 1/1', fill=pdf.TEXT_MUTED, font=small_font)

    return pdf.pages_to_pdf([page])


def default_proforma_items(order) -> List[ProformaItem]:
    return [ProformaItem(
        description=f"Prestations {order.service_type} ({order.origin} → {order.destination})",
        quantity=Decimal('1'),
        unit_price=Decimal(order.value or 0),
    )]


def _docx_bytes(document) -> bytes:
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def build_proforma_docx(order, company=None, items: Optional[List[ProformaItem]] = None,
                        notes: Optional[str] = None, currency='EUR') -> bytes:
    company = company or company_info()
    items = items or default_proforma_items(order)
    total = sum((item.total for item in items), Decimal('0'))

    document = Document()
    title = document.add_heading('PROFORMA', level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    reference = document.add_paragraph(f"Référence: {order.order_number}")
    reference.alignment = WD_ALIGN_PARAGRAPH.CENTER
    document.add_paragraph(f"Date: {timezone.localdate():%d/%m/%Y}")

    sender = document.add_paragraph()
    name_run = sender.add_run(company['name'])
    name_run.bold = True
    name_run.font.size = Pt(12)
    for line in (company['address'], f"Téléphone: {company['phone']}", f"Email: {company['email']}", f"TVA: {company['vat']}"):
        sender.add_run(f"\n{line}")

    recipient = document.add_paragraph()
    recipient.add_run('Destinataire').bold = True
    for line in (order.client_name, order.client_email, order.client_phone):
        if line:
            recipient.add_run(f"\n{line}")

    table = document.add_table(rows=1, cols=4)
    table.style = 'Table Grid'
    for cell, header in zip(table.rows[0].cells, ['Description', 'Quantité', 'Prix unitaire', 'Montant']):
        cell.text = ''
        cell.paragraphs[0].add_run(header).bold = True
    for item in items:
        cells = table.add_row().cells
        cells[0].text = item.description
        cells[1].text = f"{item.quantity.normalize():f}"
        cells[2].text = format_eur(item.unit_price, currency)
        cells[3].text = format_eur(item.total, currency)
    total_cells = table.add_row().cells
    merged = total_cells[0].merge(total_cells[2])
    merged.text = ''
    merged.paragraphs[0].add_run('Total').bold = True
    total_cells[3].text = ''
    total_cells[3].paragraphs[0].add_run(format_eur(total, currency)).bold = True

    payment = document.add_paragraph()
    payment.add_run('Conditions de paiement').bold = True
    payment.add_run('\nVeuillez effectuer le paiement sur le compte suivant dans les 7 jours ouvrables:')
    payment.add_run(f"\nIBAN: {company['iban']}").bold = True
    payment.add_run(f"\nBIC: {company['bic']}").bold = True

    document.add_paragraph(
        notes or "Merci de confirmer la réception de cette proforma et de nous contacter pour toute information complémentaire."
    )
    return _docx_bytes(document)


def client_rows(clients, container_code):
    return [
        [c.name or '', c.email or '', c.phone or '', c.company or '', container_code or '']
        for c in clients
    ]


def build_clients_docx(title, rows) -> bytes:
    document = Document()
    document.add_heading(title, level=1)
    table = document.add_table(rows=1, cols=len(CLIENT_COLUMNS))
    table.style = 'Table Grid'
    for cell, header in zip(table.rows[0].cells, CLIENT_COLUMNS):
        cell.text = header
    for row in rows:
        cells = table.add_row().cells
        for cell, value in zip(cells, row):
            cell.text = str(value)
    document.add_paragraph().add_run('TVA: 0%').italic = True
    return _docx_bytes(document)


def build_clients_xlsx(sheet_name, rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    # Sheet titles are limited to 31 characters and a few forbidden symbols
    ws.title = ''.join(ch for ch in sheet_name if ch not in '[]:*?/\\')[:31] or 'Clients'

    header_fill = PatternFill(start_color="FF8C00", end_color="FF8C00", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")
    for col, header in enumerate(CLIENT_COLUMNS, 1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal='center', vertical='center')

    for row_idx, row in enumerate(rows, 2):
        for col, value in enumerate(row, 1):
            ws.cell(row=row_idx, column=col, value=value)

    for letter, width in zip('ABCDE', (28, 28, 16, 20, 18)):
        ws.column_dimensions[letter].width = width

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
