from urllib.parse import quote

from django.conf import settings

from logistics.core import pdf

SERVICE_LABELS = {
    'fret_maritime': 'Fret maritime',
    'fret_aerien': 'Fret aérien',
    'demenagement': 'Déménagement',
}

FOOTER_TEXT = 'www.danemo.be | info@danemo.be | 0488 64 51 83'


def qr_lookup_url(qr_code, base_url=None):
    base = (base_url or settings.APP_BASE_URL).rstrip('/')
    return f"{base}/qr?code={quote(qr_code, safe='')}"


def build_order_qr_pdf(order, base_url=None) -> bytes:
    """Printable A4 label: order summary, QR code to the lookup page and a Code128 barcode."""
    page, draw = pdf.new_page()
    title_font = pdf.load_font(36, bold=True)
    label_font = pdf.load_font(20, bold=True)
    body_font = pdf.load_font(16)
    mono_font = pdf.load_font(15)
    small_font = pdf.load_font(12)

    draw.rectangle([0, 0, pdf.PAGE_WIDTH, 118], fill=pdf.BRAND_ORANGE)
    draw.text((pdf.MARGIN, 38), 'DANEMO', fill='white', font=title_font)
    caption = 'QR CODE DE COMMANDE'
    draw.text((pdf.PAGE_WIDTH - pdf.MARGIN - pdf.text_width(draw, caption, body_font), 52), caption, fill='white', font=body_font)

    y = 170
    draw.text((pdf.MARGIN, y), 'Informations de la commande', fill=pdf.TEXT_DARK, font=label_font)
    y += 40
    lines = [f"Numéro de commande: {order.order_number}", f"Client: {order.client_name}"]
    if order.service_type:
        lines.append(f"Service: {SERVICE_LABELS.get(order.service_type, order.service_type)}")
    if order.origin and order.destination:
        lines.append(f"Trajet: {order.origin} → {order.destination}")
    for line in lines:
        draw.text((pdf.MARGIN, y), line, fill=pdf.TEXT_DARK, font=body_font)
        y += 28

    qr_code = order.qr_code or order.order_number
    y += 40
    qr_size = 300
    qr_image = pdf.make_qr_image(qr_lookup_url(qr_code, base_url))
    width, height = pdf.paste_fitted(page, qr_image, (pdf.PAGE_WIDTH - qr_size) // 2, y, qr_size, qr_size)
    y += height + 24
    pdf.draw_centered(draw, y, qr_code, mono_font)
    y += 30
    pdf.draw_centered(draw, y, 'Scannez ce QR code pour suivre votre commande', small_font, fill=pdf.TEXT_MUTED)

    barcode_image = pdf.make_barcode_image(order.order_number)
    if barcode_image is not None:
        y += 50
        bw, bh = pdf.paste_fitted(page, barcode_image, (pdf.PAGE_WIDTH - 420) // 2, y, 420, 110)
        y += bh + 10
        pdf.draw_centered(draw, y, order.order_number, mono_font)

    footer_y = pdf.PAGE_HEIGHT - 80
    draw.line([pdf.MARGIN, footer_y, pdf.PAGE_WIDTH - pdf.MARGIN, footer_y], fill=pdf.RULE_GREY, width=1)
    pdf.draw_centered(draw, footer_y + 20, FOOTER_TEXT, small_font)

    return pdf.pages_to_pdf([page])
