"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.task.background_task_runner import BackgroundTaskRunner
from src.service.box_office.driven_adapter.email.jinja_ticket_email_composer import (
    JinjaTicketEmailComposer,
)
from src.service.box_office.driven_adapter.email.mailgun_email_transport import (
    MailgunEmailTransport,
)
from src.service.box_office.driven_adapter.payment.stripe_payment_gateway import (
    StripePaymentGateway,
)
from src.service.box_office.driven_adapter.pdf.reportlab_ticket_pdf_renderer import (
    ReportlabTicketPdfRenderer,
)
from src.service.box_office.driven_adapter.repo.box_office_query_repo_impl import (
    BoxOfficeQueryRepoImpl,
)
from src.service.box_office.driven_adapter.repo.order_command_repo_impl import (
    OrderCommandRepoImpl,
)
from src.service.box_office.driven_adapter.repo.reservation_command_repo_impl import (
    ReservationCommandRepoImpl,
)
from src.service.box_office.driven_adapter.repo.show_seat_command_repo_impl import (
    ShowSeatCommandRepoImpl,
)
from src.service.box_office.driven_adapter.repo.ticket_command_repo_impl import (
    TicketCommandRepoImpl,
)
from src.service.box_office.driven_adapter.storage.s3_object_storage import S3ObjectStorage
from src.service.box_office.driving_adapter.http_controller.auth.jwt_auth import JwtAuth
from src.service.box_office.driving_adapter.http_controller.auth.reservation_session import (
    ReservationSessionResolver,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (AsyncEngineManager picks pool settings from config)
    database = providers.Singleton(Database)

    # Repositories (stateless - use session_factory per call)
    show_seat_command_repo = providers.Singleton(
        ShowSeatCommandRepoImpl, session_factory=database.provided.session
    )
    reservation_command_repo = providers.Singleton(
        ReservationCommandRepoImpl, session_factory=database.provided.session
    )
    order_command_repo = providers.Singleton(
        OrderCommandRepoImpl, session_factory=database.provided.session
    )
    ticket_command_repo = providers.Singleton(
        TicketCommandRepoImpl, session_factory=database.provided.session
    )
    box_office_query_repo = providers.Singleton(
        BoxOfficeQueryRepoImpl, session_factory=database.provided.session
    )

    # External services
    payment_gateway = providers.Singleton(StripePaymentGateway)
    email_transport = providers.Singleton(MailgunEmailTransport)
    object_storage = providers.Singleton(S3ObjectStorage)

    # Ticket artifacts
    ticket_pdf_renderer = providers.Singleton(ReportlabTicketPdfRenderer)
    ticket_email_composer = providers.Singleton(JinjaTicketEmailComposer)

    # Background jobs (task group attached by main.py lifespan)
    task_runner = providers.Singleton(
        BackgroundTaskRunner,
        max_attempts=config_service.provided.BACKGROUND_TASK_MAX_ATTEMPTS,
        backoff_seconds=config_service.provided.BACKGROUND_TASK_BACKOFF_SECONDS,
    )

    # Auth / session identity
    jwt_auth = providers.Singleton(JwtAuth)
    session_resolver = providers.Singleton(ReservationSessionResolver, jwt_auth=jwt_auth)


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
