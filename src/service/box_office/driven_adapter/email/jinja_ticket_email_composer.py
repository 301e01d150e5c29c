from datetime import date
from pathlib import Path
from typing import Dict, Optional
from uuid import UUID

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from src.platform.config.core_setting import settings
from src.platform.constant.path import EMAIL_TEMPLATE_DIR
from src.service.box_office.app.dto.box_office_dto import OrderDocument
from src.service.box_office.app.interface.i_email_transport import EmailMessage
from src.service.box_office.app.interface.i_ticket_artifact_renderer import ITicketEmailComposer


def format_money(amount_in_cents: int) -> str:
    return f'${amount_in_cents / 100:,.2f}'


def format_show_date(value: date) -> str:
    return f'{value:%A, %B} {value.day}, {value:%Y}'


class JinjaTicketEmailComposer(ITicketEmailComposer):
    def __init__(
        self,
        *,
        studio_name: Optional[str] = None,
        primary_color: Optional[str] = None,
        template_dir: Path = EMAIL_TEMPLATE_DIR,
    ) -> None:
        self.studio_name = studio_name or settings.STUDIO_NAME
        self.primary_color = primary_color or settings.STUDIO_PRIMARY_COLOR
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(enabled_extensions=('html.j2',), default=False),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters['money'] = format_money
        self.env.filters['show_date'] = format_show_date

    def _render_pair(self, name: str, **context) -> tuple[str, str]:
        context = {
            'studio_name': self.studio_name,
            'primary_color': self.primary_color,
            **context,
        }
        html = self.env.get_template(f'{name}.html.j2').render(**context)
        text = self.env.get_template(f'{name}.txt.j2').render(**context)
        return html, text

    def compose_confirmation(
        self, *, document: OrderDocument, recipient: str, pdf_urls: Dict[UUID, str]
    ) -> EmailMessage:
        subject = f'Your Tickets for {document.show.name}'
        tickets = [
            {
                'ticket': item.ticket,
                'seat': item.seat,
                'pdf_url': pdf_urls.get(item.ticket.id) or item.ticket.pdf_url,
            }
            for item in document.tickets
        ]
        html, text = self._render_pair(
            'confirmation',
            subject=subject,
            order=document.order,
            show=document.show,
            tickets=tickets,
        )
        return EmailMessage(
            to=recipient,
            subject=subject,
            html=html,
            text=text,
            tags=['ticket-confirmation', f'order-{document.order.order_number}'],
        )

    def compose_refund(
        self,
        *,
        document: OrderDocument,
        recipient: str,
        amount_in_cents: int,
        is_full_refund: bool,
    ) -> EmailMessage:
        subject = f'Refund Processed for Order {document.order.order_number}'
        html, text = self._render_pair(
            'refund',
            subject=subject,
            order=document.order,
            show=document.show,
            amount_in_cents=amount_in_cents,
            is_full_refund=is_full_refund,
        )
        return EmailMessage(
            to=recipient,
            subject=subject,
            html=html,
            text=text,
            tags=['order-refund', f'order-{document.order.order_number}'],
        )
