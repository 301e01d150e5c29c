from uuid import UUID

from fastapi import APIRouter, Depends, Response

from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.command.get_or_generate_ticket_pdf_use_case import (
    PDF_CONTENT_TYPE,
    GetOrGenerateTicketPdfUseCase,
)
from src.service.box_office.app.command.send_confirmation_email_use_case import (
    SendConfirmationEmailUseCase,
)
from src.service.box_office.app.command.verify_ticket_use_case import VerifyTicketUseCase
from src.service.box_office.domain.value_object.contact import normalize_email
from src.service.box_office.driving_adapter.http_controller.auth.jwt_auth import CurrentUser
from src.service.box_office.driving_adapter.http_controller.auth.role_auth import (
    require_admin_or_staff,
)
from src.service.box_office.driving_adapter.http_controller.schema.ticket_schema import (
    GeneratePdfRequest,
    GeneratePdfResponse,
    ResendEmailRequest,
    ResendEmailResponse,
    VerifyTicketRequest,
    VerifyTicketResponse,
)


router = APIRouter()


@router.post('/generate-pdf')
@Logger.io
async def generate_ticket_pdf(
    request: GeneratePdfRequest,
    use_case: GetOrGenerateTicketPdfUseCase = Depends(GetOrGenerateTicketPdfUseCase.depends),
) -> GeneratePdfResponse:
    return GeneratePdfResponse(pdf_url=await use_case.get_or_generate(ticket_id=request.ticket_id))


@router.get('/{ticket_id}/download')
@Logger.io
async def download_ticket_pdf(
    ticket_id: UUID,
    use_case: GetOrGenerateTicketPdfUseCase = Depends(GetOrGenerateTicketPdfUseCase.depends),
) -> Response:
    pdf = await use_case.download(ticket_id=ticket_id)
    return Response(
        content=pdf,
        media_type=PDF_CONTENT_TYPE,
        headers={'Content-Disposition': f'attachment; filename="ticket-{ticket_id}.pdf"'},
    )


@router.post('/resend-email')
@Logger.io
async def resend_confirmation_email(
    request: ResendEmailRequest,
    current_user: CurrentUser = Depends(require_admin_or_staff),
    use_case: SendConfirmationEmailUseCase = Depends(SendConfirmationEmailUseCase.depends),
) -> ResendEmailResponse:
    recipient = normalize_email(request.email) if request.email else None
    await use_case.resend_confirmation_email(order_id=request.order_id, recipient=recipient)
    return ResendEmailResponse(success=True, message='Tickets sent successfully')


@router.post('/verify')
@Logger.io
async def verify_ticket(
    request: VerifyTicketRequest,
    current_user: CurrentUser = Depends(require_admin_or_staff),
    use_case: VerifyTicketUseCase = Depends(VerifyTicketUseCase.depends),
) -> VerifyTicketResponse:
    verification = await use_case.verify_ticket(
        ticket_code=request.ticket_code, mark_scanned=request.mark_scanned
    )
    return VerifyTicketResponse.from_dto(verification)
