"""Constants and shared variables for LoguruIO."""

from contextvars import ContextVar
from enum import StrEnum


# Reservation tokens and session ids are capabilities: never let them reach the log sink
SENSITIVE_KEYWORDS = {
    'password',
    'secret',
    'token',
    'api_key',
    'authorization',
    'session_id',
}

MASK = '********'
MAX_LOG_CONTENT_LENGTH = 2000

chain_start_time_var: ContextVar[float] = ContextVar('first_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'
