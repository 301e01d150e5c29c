from abc import ABC, abstractmethod
from typing import List, Optional

import attrs


@attrs.define(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str
    text: str
    tags: List[str] = attrs.field(factory=list)


@attrs.define(frozen=True)
class EmailSendResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class IEmailTransport(ABC):
    @abstractmethod
    async def send(self, *, message: EmailMessage) -> EmailSendResult:
        """Deliver one message. Transport errors are reported in the result, not raised."""
        pass
