from io import BytesIO
from typing import Optional

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.pdfgen.canvas import Canvas

from src.platform.config.core_setting import settings
from src.service.box_office.app.dto.box_office_dto import TicketDocument
from src.service.box_office.app.interface.i_ticket_artifact_renderer import ITicketPdfRenderer


PAGE_WIDTH = 600
PAGE_HEIGHT = 400
QR_SIZE = 150
MARGIN = 30


class ReportlabTicketPdfRenderer(ITicketPdfRenderer):
    """
    Single 600x400 page per ticket.

    `invariant=1` pins the creation date and document id, so rendering the same
    ticket twice yields byte-identical output.
    """

    def __init__(
        self, *, studio_name: Optional[str] = None, primary_color: Optional[str] = None
    ) -> None:
        self.studio_name = studio_name or settings.STUDIO_NAME
        self.primary_color = colors.HexColor(primary_color or settings.STUDIO_PRIMARY_COLOR)

    def render(self, *, document: TicketDocument) -> bytes:
        buffer = BytesIO()
        canvas = Canvas(buffer, pagesize=(PAGE_WIDTH, PAGE_HEIGHT), invariant=1)
        canvas.setTitle(f'{document.show.name} - {document.ticket.ticket_code}')
        canvas.setAuthor(self.studio_name)

        self._draw_header(canvas, document)
        self._draw_details(canvas, document)
        self._draw_qr(canvas, document.ticket.ticket_code)
        self._draw_footer(canvas, document)

        canvas.showPage()
        canvas.save()
        return buffer.getvalue()

    def _draw_header(self, canvas: Canvas, document: TicketDocument) -> None:
        canvas.setFillColor(self.primary_color)
        canvas.rect(0, PAGE_HEIGHT - 70, PAGE_WIDTH, 70, stroke=0, fill=1)
        canvas.setFillColor(colors.white)
        canvas.setFont('Helvetica-Bold', 20)
        canvas.drawString(MARGIN, PAGE_HEIGHT - 42, self.studio_name)
        canvas.setFont('Helvetica', 11)
        canvas.drawRightString(PAGE_WIDTH - MARGIN, PAGE_HEIGHT - 42, 'ADMIT ONE')

    def _draw_details(self, canvas: Canvas, document: TicketDocument) -> None:
        show = document.show
        seat = document.seat
        y = PAGE_HEIGHT - 105

        canvas.setFillColor(colors.black)
        canvas.setFont('Helvetica-Bold', 18)
        canvas.drawString(MARGIN, y, show.name)

        when = f'{show.show_date:%A, %B} {show.show_date.day}, {show.show_date:%Y}'
        if show.start_time:
            when = f'{when} at {show.start_time}'
        canvas.setFont('Helvetica', 12)
        y -= 24
        canvas.drawString(MARGIN, y, when)
        if show.venue_name:
            y -= 18
            canvas.drawString(MARGIN, y, show.venue_name)
        if show.venue_address:
            y -= 16
            canvas.setFont('Helvetica', 10)
            canvas.drawString(MARGIN, y, show.venue_address)

        y -= 40
        columns = (('SECTION', seat.section), ('ROW', seat.row), ('SEAT', str(seat.number)))
        for i, (label, value) in enumerate(columns):
            x = MARGIN + i * 110
            canvas.setFont('Helvetica', 9)
            canvas.setFillColor(colors.grey)
            canvas.drawString(x, y + 22, label)
            canvas.setFont('Helvetica-Bold', 20)
            canvas.setFillColor(colors.black)
            canvas.drawString(x, y, value)

        y -= 40
        canvas.setFont('Helvetica', 10)
        canvas.drawString(MARGIN, y, f'Order: {document.order_number}')
        canvas.drawString(MARGIN, y - 16, f'Name: {document.customer_name}')

    def _draw_qr(self, canvas: Canvas, ticket_code: str) -> None:
        widget = QrCodeWidget(ticket_code)
        x0, y0, x1, y1 = widget.getBounds()
        drawing = Drawing(
            QR_SIZE,
            QR_SIZE,
            transform=[QR_SIZE / (x1 - x0), 0, 0, QR_SIZE / (y1 - y0), 0, 0],
        )
        drawing.add(widget)

        x = PAGE_WIDTH - MARGIN - QR_SIZE
        y = PAGE_HEIGHT - 100 - QR_SIZE
        renderPDF.draw(drawing, canvas, x, y)

        canvas.setFont('Helvetica', 9)
        canvas.setFillColor(colors.grey)
        canvas.drawCentredString(x + QR_SIZE / 2, y - 12, 'Scan at entrance')

    def _draw_footer(self, canvas: Canvas, document: TicketDocument) -> None:
        canvas.setStrokeColor(colors.lightgrey)
        canvas.line(MARGIN, 50, PAGE_WIDTH - MARGIN, 50)
        canvas.setFont('Courier-Bold', 11)
        canvas.setFillColor(colors.black)
        canvas.drawString(MARGIN, 32, document.ticket.ticket_code)
        canvas.setFont('Helvetica', 8)
        canvas.setFillColor(colors.grey)
        canvas.drawRightString(
            PAGE_WIDTH - MARGIN,
            32,
            'Non-transferable. Valid for one admission. Please arrive 15 minutes early.',
        )
