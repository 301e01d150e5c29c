from typing import Optional

import httpx

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.interface.i_email_transport import (
    EmailMessage,
    EmailSendResult,
    IEmailTransport,
)


class MailgunEmailTransport(IEmailTransport):
    """
    Mailgun HTTP API (POST {base}/{domain}/messages, basic auth `api:<key>`).

    Constructed once by the DI container; tests hand in an httpx.MockTransport.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        domain: Optional[str] = None,
        base_url: Optional[str] = None,
        sender: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.MAILGUN_API_KEY.get_secret_value()
        self._domain = domain or settings.MAILGUN_DOMAIN
        self._base_url = (base_url or settings.MAILGUN_API_BASE_URL).rstrip('/')
        self._sender = sender or settings.EMAIL_FROM
        self._timeout = timeout_seconds or settings.EMAIL_TIMEOUT_SECONDS
        self._transport = transport

    @Logger.io
    async def send(self, *, message: EmailMessage) -> EmailSendResult:
        if not self._api_key:
            Logger.base.warning('📧 [EMAIL] MAILGUN_API_KEY is not configured; email not sent')
            return EmailSendResult(success=False, error='Email service not configured')

        data = {
            'from': self._sender,
            'to': message.to,
            'subject': message.subject,
            'html': message.html,
            'text': message.text,
            'o:tag': list(message.tags),
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    f'{self._base_url}/{self._domain}/messages',
                    auth=('api', self._api_key),
                    data=data,
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            Logger.base.error(
                f'📧 [EMAIL] Mailgun rejected message to {message.to}: '
                f'{e.response.status_code} {e.response.text[:200]}'
            )
            return EmailSendResult(success=False, error=f'HTTP {e.response.status_code}')
        except httpx.HTTPError as e:
            Logger.base.error(f'📧 [EMAIL] Mailgun request failed for {message.to}: {e}')
            return EmailSendResult(success=False, error=str(e) or type(e).__name__)

        message_id = response.json().get('id')
        Logger.base.info(f'📧 [EMAIL] Sent "{message.subject}" to {message.to} ({message_id})')
        return EmailSendResult(success=True, message_id=message_id)
