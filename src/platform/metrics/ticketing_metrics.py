from prometheus_client import Counter, Histogram


class TicketingMetrics:
    """
    Box office business metrics

    Tracks the hold -> order -> refund funnel and the artifact pipeline so that
    seat contention (409 rate) and email delivery failures are visible on /metrics.
    """

    def __init__(self) -> None:
        # ========== Reservation Metrics ==========
        self.reservation_requests = Counter(
            'box_office_reservation_requests_total',
            'Seat hold attempts',
            ['result'],  # result: success/seat_unavailable/error
        )

        self.reservation_seats = Histogram(
            'box_office_reservation_seats',
            'Seats per successful hold',
            buckets=[1, 2, 3, 4, 5, 6, 8, 10],
        )

        self.reservations_released = Counter(
            'box_office_reservations_released_total',
            'Holds released before purchase',
            ['reason'],  # reason: cancelled/expired
        )

        # ========== Order Metrics ==========
        self.order_requests = Counter(
            'box_office_order_requests_total',
            'Order fulfillment attempts',
            ['result'],  # result: success/<error class name>
        )

        self.order_amount_cents = Histogram(
            'box_office_order_amount_cents',
            'Order totals in cents',
            buckets=[1000, 2500, 5000, 10000, 20000, 50000],
        )

        self.refunds = Counter(
            'box_office_refunds_total',
            'Refunds issued',
            ['kind'],  # kind: full/partial
        )

        # ========== Artifact Pipeline Metrics ==========
        self.ticket_pdfs_generated = Counter(
            'box_office_ticket_pdfs_generated_total',
            'Ticket PDFs rendered and uploaded',
        )

        self.ticket_emails = Counter(
            'box_office_ticket_emails_total',
            'Confirmation / refund emails',
            ['kind', 'result'],  # kind: confirmation/refund, result: sent/failed
        )

        self.background_task_failures = Counter(
            'box_office_background_task_failures_total',
            'Background jobs that exhausted their retries',
            ['job'],
        )


# Global metrics instance (prometheus collectors register once per process)
metrics = TicketingMetrics()
