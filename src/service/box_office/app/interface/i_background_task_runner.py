from collections.abc import Awaitable, Callable
from typing import Any, Protocol


class IBackgroundTaskRunner(Protocol):
    """Hands a coroutine function to a supervised background executor with retries."""

    def submit(
        self, *, job_name: str, func: Callable[..., Awaitable[Any]], **kwargs: Any
    ) -> None: ...
