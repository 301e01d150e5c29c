import re
from os.path import basename
from time import time
from typing import Any, Callable

from src.platform.logging.loguru_io_constants import (
    MASK,
    MAX_LOG_CONTENT_LENGTH,
    SENSITIVE_KEYWORDS,
    call_depth_var,
    chain_start_time_var,
)


# Matches `token='...'` (attrs/dataclass repr) and `'token': '...'` (dict repr)
_SENSITIVE_PATTERN = re.compile(
    r"(\b\w*(?:%s)\w*'?)(\s*[:=]\s*)'[^']*'" % '|'.join(sorted(SENSITIVE_KEYWORDS)),
    re.IGNORECASE,
)


def get_chain_start_time() -> float:
    if not (start_time := chain_start_time_var.get()):
        start_time = time()
        chain_start_time_var.set(start_time)
    return start_time


def build_call_target_func_path(func: Callable[..., Any]) -> str:
    code = getattr(getattr(func, '__func__', func), '__code__', None)
    if code is None:
        return func.__qualname__
    return f'{basename(code.co_filename)}::{func.__qualname__}:{code.co_firstlineno}'


def reset_call_depth() -> None:
    layer = call_depth_var.get() - 1
    call_depth_var.set(layer)
    if not layer:
        chain_start_time_var.set(0)


def mask_sensitive(data: Any) -> Any:
    data_str = str(data)
    masked = _SENSITIVE_PATTERN.sub(rf"\1\2'{MASK}'", data_str)
    return data if masked == data_str else masked


def should_mask_keyword(keyword: Any, value: Any) -> Any:
    if isinstance(keyword, str) and any(word in keyword.lower() for word in SENSITIVE_KEYWORDS):
        return MASK
    return value


def truncate_content(data: Any) -> Any:
    data_str = str(data)
    if len(data_str) <= MAX_LOG_CONTENT_LENGTH:
        return data
    return f'{data_str[:MAX_LOG_CONTENT_LENGTH]}...(+{len(data_str) - MAX_LOG_CONTENT_LENGTH} chars)'
