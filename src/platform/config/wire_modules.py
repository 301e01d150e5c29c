"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.box_office.app.command import (
    cancel_reservation_use_case,
    create_order_use_case,
    create_payment_intent_use_case,
    create_reservation_use_case,
    extend_reservation_use_case,
    get_or_generate_ticket_pdf_use_case,
    refund_order_use_case,
    send_confirmation_email_use_case,
    send_refund_notification_use_case,
    verify_ticket_use_case,
)
from src.service.box_office.app.query import (
    get_reservation_use_case,
    list_show_seats_use_case,
    lookup_order_use_case,
    validate_reservation_ownership_use_case,
)
from src.service.box_office.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    create_reservation_use_case,
    cancel_reservation_use_case,
    extend_reservation_use_case,
    create_order_use_case,
    create_payment_intent_use_case,
    refund_order_use_case,
    get_or_generate_ticket_pdf_use_case,
    send_confirmation_email_use_case,
    send_refund_notification_use_case,
    verify_ticket_use_case,
    get_reservation_use_case,
    list_show_seats_use_case,
    lookup_order_use_case,
    validate_reservation_ownership_use_case,
    role_auth,
]
