from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any, Optional

import anyio
from anyio.abc import TaskGroup

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics


class BackgroundTaskRunner:
    """
    Fire-and-forget jobs on the application's anyio task group.

    The task group is owned by the FastAPI lifespan (see src/main.py), so jobs are
    cancelled on shutdown instead of being orphaned. Each job gets bounded retries
    with linear backoff; a job may signal a soft failure by returning ``False``.
    """

    def __init__(self, *, max_attempts: int = 3, backoff_seconds: float = 2.0) -> None:
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self._task_group: Optional[TaskGroup] = None

    def attach(self, task_group: TaskGroup) -> None:
        self._task_group = task_group

    def detach(self) -> None:
        self._task_group = None

    @property
    def is_running(self) -> bool:
        return self._task_group is not None

    def submit(self, *, job_name: str, func: Callable[..., Awaitable[Any]], **kwargs: Any) -> None:
        if self._task_group is None:
            raise RuntimeError(f'Background task runner is not started (job={job_name})')
        self._task_group.start_soon(self._run_with_retry, job_name, partial(func, **kwargs))
        Logger.base.info(f'📮 [BG-TASK] Queued {job_name}')

    async def _run_with_retry(self, job_name: str, job: Callable[[], Awaitable[Any]]) -> None:
        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await job()
            # An exception escaping here would cancel every task in the group
            except Exception as e:
                Logger.base.opt(exception=e).warning(
                    f'⚠️ [BG-TASK] {job_name} attempt {attempt}/{self.max_attempts} raised {type(e).__name__}: {e}'
                )
            else:
                if result is not False:
                    Logger.base.info(f'✅ [BG-TASK] {job_name} done (attempt {attempt})')
                    return
                Logger.base.warning(
                    f'⚠️ [BG-TASK] {job_name} attempt {attempt}/{self.max_attempts} reported failure'
                )

            if attempt < self.max_attempts:
                await anyio.sleep(self.backoff_seconds * attempt)

        metrics.background_task_failures.labels(job=job_name.split(':')[0]).inc()
        Logger.base.error(
            f'❌ [BG-TASK] {job_name} gave up after {self.max_attempts} attempts; retry manually'
        )
